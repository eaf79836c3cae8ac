"""In-memory implementation of the advertiser gateway."""

from __future__ import annotations

from typing import Dict

from ..contracts import AdvertiserRecord
from ..errors import AdvertiserNotFoundError
from ..utils.ids import require_positive
from .gateway import AdvertiserGateway


class InMemoryAdvertiserGateway(AdvertiserGateway):
    """Keep advertiser records in local memory.

    Useful for tests and dry runs. Every lookup is counted in ``lookups`` so
    callers can assert on how often the store was touched.
    """

    def __init__(self, records: list[AdvertiserRecord] | None = None) -> None:
        self._records: Dict[str, AdvertiserRecord] = {}
        self.lookups = 0
        for record in records or []:
            self.add(record)

    def add(self, record: AdvertiserRecord) -> None:
        self._records[record.external_id] = record

    async def find_by_external_id(self, external_id: int) -> AdvertiserRecord:
        require_positive("external_id", external_id)
        self.lookups += 1
        record = self._records.get(str(external_id))
        if record is None:
            raise AdvertiserNotFoundError(external_id)
        return record

    async def delete_by_external_id(self, external_id: int) -> None:
        require_positive("external_id", external_id)
        self._records.pop(str(external_id), None)

    async def delete_by_awin_id(self, awin_id: int) -> None:
        require_positive("awin_id", awin_id)
        for key, record in list(self._records.items()):
            if record.awin_id == str(awin_id):
                del self._records[key]
