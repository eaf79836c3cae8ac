"""TigerClaw: step orchestration for SAS to AWIN advertiser migrations."""

from .client import MigrationServiceClient
from .config import TigerClawConfig, load_config, validate_config
from .contracts import (
    AdvertiserRecord,
    InvocationReport,
    StatusPayload,
    StepExecutionOutcome,
    StepNotFound,
    StepSuccess,
    StepTransportFailure,
    StepUnauthorized,
    StepUnexpectedStatus,
)
from .execute import StepExecutor
from .orchestrator import MigrationOrchestrator
from .persistence import get_gateway
from .status import Lifecycle, MigrationStatus, WorkflowPhase, decode, encode

__version__ = "0.1.0"
__all__ = [
    "AdvertiserRecord",
    "InvocationReport",
    "Lifecycle",
    "MigrationOrchestrator",
    "MigrationServiceClient",
    "MigrationStatus",
    "StatusPayload",
    "StepExecutionOutcome",
    "StepExecutor",
    "StepNotFound",
    "StepSuccess",
    "StepTransportFailure",
    "StepUnauthorized",
    "StepUnexpectedStatus",
    "TigerClawConfig",
    "WorkflowPhase",
    "decode",
    "encode",
    "get_gateway",
    "load_config",
    "validate_config",
]
