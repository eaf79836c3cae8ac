"""Workflow phases and migration status tokens.

The remote migration service speaks in string tokens such as ``INIT_RUN`` or
``MEM_TAG_DONE``. Tokens are decoded into :class:`MigrationStatus` values at
the boundary and never carried around as raw strings.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict

from .errors import InvalidInputError, StatusDecodeError


class WorkflowPhase(str, Enum):
    """Stages of the SAS to AWIN migration pipeline, in canonical order."""

    INIT = "INIT"
    VALID = "VALID"
    SF = "SF"
    ADV = "ADV"
    PUB = "PUB"
    TRACK = "TRACK"
    VOUCH = "VOUCH"
    MEM_TAG = "MEM_TAG"
    COM = "COM"
    FEE = "FEE"
    FEED = "FEED"
    CREATIVE = "CREATIVE"

    @property
    def token(self) -> str:
        return self.value

    @classmethod
    def parse(cls, token: str) -> "WorkflowPhase":
        """Return the phase named by ``token`` (case-insensitive)."""
        try:
            return cls(token.strip().upper())
        except ValueError:
            raise InvalidInputError(f"Unknown workflow phase: {token!r}") from None


class Lifecycle(str, Enum):
    """Disposition of a single phase."""

    RUNNING = "RUN"
    DONE = "DONE"
    ERROR = "ERR"

    @property
    def token(self) -> str:
        return self.value


class MigrationStatus(BaseModel):
    """Where one advertiser sits in the workflow.

    ``phase`` and ``lifecycle`` come from the status token itself.
    ``context_phase`` is the phase supplied by whoever decoded the token and
    defaults to ``INIT`` when the reader had no better context. Records read
    from the advertiser store always carry ``INIT`` here, even for a token
    like ``SF_DONE``; callers that need the phase should read ``phase``.
    """

    model_config = ConfigDict(frozen=True)

    phase: WorkflowPhase
    lifecycle: Lifecycle
    context_phase: WorkflowPhase = WorkflowPhase.INIT

    @property
    def token(self) -> str:
        return encode(self.phase, self.lifecycle)

    def __str__(self) -> str:
        return self.token


def encode(phase: WorkflowPhase, lifecycle: Lifecycle) -> str:
    """Return the wire token for ``phase`` in ``lifecycle``."""
    return f"{phase.token}_{lifecycle.token}"


_TOKENS: Dict[str, tuple[WorkflowPhase, Lifecycle]] = {
    encode(phase, lifecycle): (phase, lifecycle)
    for phase in WorkflowPhase
    for lifecycle in Lifecycle
}


def decode(
    token: str, fallback_phase: WorkflowPhase = WorkflowPhase.INIT
) -> MigrationStatus:
    """Decode a status token.

    Args:
        token: Status token, matched case-insensitively.
        fallback_phase: Phase context to attach to the decoded status.

    Raises:
        StatusDecodeError: ``token`` is not one of the known tokens.
    """
    try:
        phase, lifecycle = _TOKENS[token.strip().upper()]
    except (KeyError, AttributeError):
        raise StatusDecodeError(token) from None
    return MigrationStatus(phase=phase, lifecycle=lifecycle, context_phase=fallback_phase)


def all_tokens() -> List[str]:
    """Every valid status token, phases in canonical order."""
    return list(_TOKENS)


DEFAULT_STATUS = MigrationStatus(phase=WorkflowPhase.INIT, lifecycle=Lifecycle.RUNNING)
