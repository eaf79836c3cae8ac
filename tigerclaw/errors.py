"""Exception types raised by tigerclaw."""

from __future__ import annotations

from typing import Optional


class TigerClawError(Exception):
    """Base class for all tigerclaw errors."""


class InvalidInputError(TigerClawError, ValueError):
    """Input rejected locally, before any network or store access."""


class ConfigError(TigerClawError):
    """Configuration could not be loaded or failed validation."""


class CredentialError(TigerClawError):
    """A bearer token could not be obtained."""


class StatusDecodeError(TigerClawError, ValueError):
    """A migration status token is not part of the known vocabulary."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unknown migration status token: {token!r}")
        self.token = token


class AdvertiserNotFoundError(TigerClawError):
    """No advertiser record matched the requested identifier."""

    def __init__(self, external_id: int, detail: Optional[str] = None) -> None:
        super().__init__(detail or f"No advertiser found for id: {external_id}")
        self.external_id = external_id


class RecordStoreError(TigerClawError):
    """The advertiser record store failed to answer."""


class StatusPayloadDecodeError(TigerClawError):
    """A 404 response body did not carry the structured status payload."""

    def __init__(self, body: str, cause: Exception) -> None:
        super().__init__(f"Failed to parse response: {cause}")
        self.body = body
        self.cause = cause


class UnauthorizedError(TigerClawError):
    """The remote service rejected the bearer token."""

    def __init__(self) -> None:
        super().__init__("Unauthorized access: Invalid JWT token")


class UnexpectedStatusError(TigerClawError):
    """The remote service answered with a status code we do not handle."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Unexpected status code: {status_code}")
        self.status_code = status_code


class DataImportError(TigerClawError):
    """The SAS data import service could not return the requested data."""
