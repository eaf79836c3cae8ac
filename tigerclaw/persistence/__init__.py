"""Advertiser record store access."""

from __future__ import annotations

from typing import Optional

from ..config import TigerClawConfig
from .dynamo import DynamoAdvertiserGateway, record_from_item
from .gateway import AdvertiserGateway
from .inmemory import InMemoryAdvertiserGateway


def get_gateway(config: Optional[TigerClawConfig] = None) -> AdvertiserGateway:
    """Return the DynamoDB gateway described by ``config``."""
    config = config or TigerClawConfig()
    return DynamoAdvertiserGateway.from_config(config.record_store)


__all__ = [
    "AdvertiserGateway",
    "DynamoAdvertiserGateway",
    "InMemoryAdvertiserGateway",
    "get_gateway",
    "record_from_item",
]
