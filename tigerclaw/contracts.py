"""Core data contracts for the migration workflow."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .status import DEFAULT_STATUS, MigrationStatus, WorkflowPhase

SUPPORTED_MIGRATION_NAME = "sas"


class StatusPayload(BaseModel):
    """Structured body returned by the migration service alongside a 404."""

    timestamp: str
    status: int = Field(ge=-32768, le=32767)
    error: str
    path: str


class TermsAcceptance(BaseModel):
    """Terms and conditions acceptance recorded for an advertiser."""

    terms_status: str = "Pending"
    terms_awin_user_id: str = ""
    terms_timestamp: Optional[datetime] = None


class AdvertiserRecord(BaseModel):
    """One advertiser undergoing migration, as persisted in the record store."""

    migration_name: str = SUPPORTED_MIGRATION_NAME
    awin_id: str = ""
    external_id: str = ""
    migration_completed: bool = False
    migration_status: MigrationStatus = DEFAULT_STATUS
    migration_status_token: str = "Pending"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    terms: TermsAcceptance = Field(default_factory=TermsAcceptance)

    def validation_errors(self) -> List[str]:
        """Return a list of validation problems; empty when the record is usable."""
        errors: List[str] = []
        if self.migration_name != SUPPORTED_MIGRATION_NAME:
            errors.append("Migration name must be sas")
        if not self.awin_id:
            errors.append("Awin ID is required")
        if not self.external_id:
            errors.append("External ID is required")
        return errors


# ---------------------------------------------------------------------------
# Step execution outcomes


class StepSuccess(BaseModel):
    kind: Literal["success"] = "success"
    status_code: int
    body: str = ""

    @property
    def is_success(self) -> bool:
        """``True`` when the wrapped status code is in the 2xx class."""
        return 200 <= self.status_code < 300


class StepNotFound(BaseModel):
    kind: Literal["not_found"] = "not_found"
    payload: StatusPayload


class StepUnauthorized(BaseModel):
    kind: Literal["unauthorized"] = "unauthorized"


class StepUnexpectedStatus(BaseModel):
    kind: Literal["unexpected_status"] = "unexpected_status"
    status_code: int
    body: str = ""


class StepTransportFailure(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: Literal["transport_failure"] = "transport_failure"
    cause: Exception

    @property
    def message(self) -> str:
        return f"{type(self.cause).__name__}: {self.cause}"


class StepInvalidInput(BaseModel):
    kind: Literal["invalid_input"] = "invalid_input"
    reason: str


StepExecutionOutcome = Union[
    StepSuccess,
    StepNotFound,
    StepUnauthorized,
    StepUnexpectedStatus,
    StepTransportFailure,
]


def describe_outcome(outcome: StepExecutionOutcome | StepInvalidInput) -> str:
    """Human readable summary used in logs and CLI output."""
    if isinstance(outcome, StepSuccess):
        return f"HTTP {outcome.status_code}"
    if isinstance(outcome, StepNotFound):
        return f"Advertiser not found: {outcome.payload.model_dump()}"
    if isinstance(outcome, StepUnauthorized):
        return "Unauthorized access: Invalid JWT token"
    if isinstance(outcome, StepUnexpectedStatus):
        return f"Unexpected status code: {outcome.status_code}"
    if isinstance(outcome, StepTransportFailure):
        return f"Request error: {outcome.message}"
    return f"Invalid input: {outcome.reason}"


class SubStepReport(BaseModel):
    """Outcome of one sub-step of an orchestration run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    target: str
    outcome: Optional[
        Union[
            StepSuccess,
            StepNotFound,
            StepUnauthorized,
            StepUnexpectedStatus,
            StepTransportFailure,
        ]
    ] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return (
            self.error is None
            and isinstance(self.outcome, StepSuccess)
            and self.outcome.is_success
        )


class InvocationReport(BaseModel):
    """Aggregated result of one orchestration run for one advertiser."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    external_id: Optional[int] = None
    phase: Optional[WorkflowPhase] = None
    init: Optional[SubStepReport] = None
    force: Optional[SubStepReport] = None
    step: Optional[SubStepReport] = None
    invalid_input: Optional[StepInvalidInput] = None

    @property
    def outcome(self) -> Union[StepExecutionOutcome, StepInvalidInput, None]:
        """The authoritative outcome of the run."""
        if self.invalid_input is not None:
            return self.invalid_input
        return self.step.outcome if self.step else None

    @property
    def succeeded(self) -> bool:
        return self.invalid_input is None and self.step is not None and self.step.succeeded


# ---------------------------------------------------------------------------
# Supporting service payloads


class ServiceHealth(BaseModel):
    status: str


class Merchant(BaseModel):
    """Merchant record exported by the SAS data import service."""

    model_config = ConfigDict(populate_by_name=True)

    merchant_id: int = Field(alias="merchantId")
    organization: str
    username: str
    email: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    address: str
    address2: str
    city: str
    state: str
    country: str
    zip: str
    phone: str
    bio: str
    category: str
    agreement: str
    logo_file: str = Field(alias="logoFile")
    data_feeds: Optional[int] = Field(default=None, alias="dataFeeds")
    external_id: int = Field(alias="externalId")
    is_private: Optional[bool] = Field(default=None, alias="isPrivate")
    approved: Optional[bool] = None
    setup_step: Optional[str] = Field(default=None, alias="stepupstep")
    balance: Optional[float] = None
    credit_limit: Optional[float] = Field(default=None, alias="creditLimit")
    advertiser_platform_plan: str = Field(alias="advertiserPlatformPlan")


class TermParams(BaseModel):
    external_program_id: int
    external_program_name: str
    awin_tech_fee: int
    tech_bundle: int
    tracking_fee_type: str
    service_package: str
    tracking_fee: int
    validation_period: int

    def validation_errors(self) -> List[str]:
        errors: List[str] = []
        if self.external_program_id <= 0:
            errors.append("External program ID must be greater than 0")
        if not self.external_program_name:
            errors.append("External program name must not be empty")
        if self.awin_tech_fee < 0:
            errors.append("AWIN tech fee must be non-negative")
        return errors


class Terms(BaseModel):
    term_status: str
    term_params: TermParams
