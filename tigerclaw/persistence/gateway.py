"""Gateway abstraction for advertiser record lookups."""

from __future__ import annotations

from typing import Protocol

from ..contracts import AdvertiserRecord


class AdvertiserGateway(Protocol):
    """Protocol for advertiser record stores."""

    async def find_by_external_id(self, external_id: int) -> AdvertiserRecord:
        """Return the record for ``external_id``.

        Raises:
            InvalidInputError: ``external_id`` is not positive.
            AdvertiserNotFoundError: No record matches.
            RecordStoreError: The store could not be queried.
        """

    async def delete_by_external_id(self, external_id: int) -> None:
        """Delete the record keyed by ``external_id``. Operator use only."""

    async def delete_by_awin_id(self, awin_id: int) -> None:
        """Delete the record keyed by ``awin_id``. Operator use only."""
