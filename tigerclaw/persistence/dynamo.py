"""DynamoDB implementation of the advertiser gateway."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..config import DEFAULT_TABLE_NAME, RecordStoreConfig
from ..contracts import AdvertiserRecord, TermsAcceptance
from ..errors import AdvertiserNotFoundError, RecordStoreError, StatusDecodeError
from ..status import DEFAULT_STATUS, decode
from ..utils.ids import require_positive
from .gateway import AdvertiserGateway

logger = logging.getLogger(__name__)

Item = Dict[str, Dict[str, Any]]


class DynamoAdvertiserGateway(AdvertiserGateway):
    """Read advertiser records from the migration table.

    The table is not keyed by ``external_id``, so lookups scan the table with a
    filter expression and stop at the first page holding a match.
    """

    def __init__(
        self,
        table_name: str = DEFAULT_TABLE_NAME,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.table_name = table_name
        self._region = region
        self._profile = profile
        self._client_override = client

    @classmethod
    def from_config(cls, config: RecordStoreConfig) -> "DynamoAdvertiserGateway":
        return cls(table_name=config.table_name, region=config.region, profile=config.profile)

    def _client(self):
        if self._client_override is not None:
            return self._client_override

        import boto3

        session = boto3.session.Session(
            profile_name=self._profile or None, region_name=self._region or None
        )
        return session.client("dynamodb")

    # ------------------------------------------------------------------
    async def find_by_external_id(self, external_id: int) -> AdvertiserRecord:
        require_positive("external_id", external_id)
        item = await asyncio.to_thread(self._scan_for_external_id, external_id)
        if item is None:
            raise AdvertiserNotFoundError(external_id)
        return record_from_item(item, external_id)

    def _scan_for_external_id(self, external_id: int) -> Item | None:
        from botocore.exceptions import BotoCoreError, ClientError

        kwargs: Dict[str, Any] = {
            "TableName": self.table_name,
            "FilterExpression": "external_id = :external_id",
            "ExpressionAttributeValues": {":external_id": {"S": str(external_id)}},
        }
        try:
            client = self._client()
            while True:
                page = client.scan(**kwargs)
                items = page.get("Items") or []
                if items:
                    return items[0]
                last_key = page.get("LastEvaluatedKey")
                if not last_key:
                    return None
                kwargs["ExclusiveStartKey"] = last_key
        except (BotoCoreError, ClientError) as e:
            raise RecordStoreError(
                f"Scan of {self.table_name} for external_id {external_id} failed: {e}"
            ) from e

    async def delete_by_external_id(self, external_id: int) -> None:
        require_positive("external_id", external_id)
        await asyncio.to_thread(self._delete, "external_id", str(external_id))

    async def delete_by_awin_id(self, awin_id: int) -> None:
        require_positive("awin_id", awin_id)
        await asyncio.to_thread(self._delete, "awin_id", str(awin_id))

    def _delete(self, key_name: str, key_value: str) -> None:
        from botocore.exceptions import BotoCoreError, ClientError

        logger.warning(f"Deleting advertiser record {key_name}={key_value} from {self.table_name}")
        try:
            self._client().delete_item(
                TableName=self.table_name, Key={key_name: {"S": key_value}}
            )
        except (BotoCoreError, ClientError) as e:
            raise RecordStoreError(f"Delete of {key_name}={key_value} failed: {e}") from e


# ----------------------------------------------------------------------
# Attribute decoding. Every attribute is optional; missing or malformed values
# fall back to a default instead of failing the lookup.


def _string(item: Item, name: str, default: str) -> str:
    value = (item.get(name) or {}).get("S")
    return value if isinstance(value, str) else default


def _bool(item: Item, name: str, default: bool = False) -> bool:
    value = (item.get(name) or {}).get("BOOL")
    return value if isinstance(value, bool) else default


def _timestamp(item: Item, name: str) -> Optional[datetime]:
    raw = (item.get(name) or {}).get("S")
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Ignoring unparsable {name} timestamp: {raw!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def record_from_item(item: Item, external_id: int) -> AdvertiserRecord:
    """Build an :class:`AdvertiserRecord` from a raw DynamoDB item."""
    fallback_id = str(external_id)
    status_token = _string(item, "migration_status", "Pending")
    try:
        status = decode(status_token)
    except StatusDecodeError:
        logger.warning(
            f"Advertiser {external_id} has unrecognised migration_status {status_token!r}, "
            f"defaulting to {DEFAULT_STATUS.token}"
        )
        status = DEFAULT_STATUS

    return AdvertiserRecord(
        migration_name=_string(item, "migration_name", "sas"),
        awin_id=_string(item, "awin_id", fallback_id),
        external_id=_string(item, "external_id", fallback_id),
        migration_completed=_bool(item, "migration_completed"),
        migration_status=status,
        migration_status_token=status_token,
        start_date=_timestamp(item, "start_date"),
        end_date=_timestamp(item, "end_date"),
        terms=TermsAcceptance(
            terms_status=_string(item, "terms_status", "Pending"),
            terms_awin_user_id=_string(item, "terms_awin_user_id", fallback_id),
            terms_timestamp=_timestamp(item, "terms_timestamp"),
        ),
    )
