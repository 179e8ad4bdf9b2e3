from pydantic import BaseModel, Field, StrictBool, StrictStr, field_validator

from ...domain.policy.processing_policy import VALID_PHASES, VALID_PROMPT_KEYS
from ...domain.types import ROOT_SENTINEL, is_valid_pi


class ReprocessOptions(BaseModel):
    """Optional knobs of a reprocessing request."""

    stop_at_pi: StrictStr | None = None
    custom_prompts: dict[str, StrictStr] | None = None
    custom_note: StrictStr | None = None

    @field_validator("stop_at_pi")
    @classmethod
    def validate_stop_at_pi(cls, v: str | None) -> str | None:
        # Empty means not given
        if not v:
            return None
        if v != ROOT_SENTINEL and not is_valid_pi(v):
            raise ValueError("Invalid stop_at_pi format (must be 26-character ULID)")
        return v

    @field_validator("custom_prompts")
    @classmethod
    def validate_custom_prompts(cls, v: dict[str, str] | None) -> dict[str, str] | None:
        if v is None:
            return v
        invalid = [key for key in v if key not in VALID_PROMPT_KEYS]
        if invalid:
            raise ValueError(
                f"Invalid custom_prompts keys: {', '.join(invalid)}. "
                f"Valid keys: {', '.join(VALID_PROMPT_KEYS)}"
            )
        return v


class ReprocessRequest(BaseModel):
    """Request DTO for the reprocessing surface."""

    pi: StrictStr
    phases: list[StrictStr]
    cascade: StrictBool = False
    options: ReprocessOptions = Field(default_factory=ReprocessOptions)

    @field_validator("pi")
    @classmethod
    def validate_pi(cls, v: str) -> str:
        if not is_valid_pi(v):
            raise ValueError("Invalid PI format (must be 26-character ULID)")
        return v

    @field_validator("phases")
    @classmethod
    def validate_phases(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("Missing or invalid field: phases (must be non-empty array)")
        invalid = [phase for phase in v if phase not in VALID_PHASES]
        if invalid:
            raise ValueError(
                f"Invalid phases: {', '.join(invalid)}. Valid phases: {', '.join(VALID_PHASES)}"
            )
        return v


class ReprocessJob(BaseModel):
    """Fully-resolved input of the reprocessing pipeline (boundary already chosen)."""

    pi: str
    phases: list[str]
    cascade: bool = False
    stop_at_pi: str = ROOT_SENTINEL
    custom_prompts: dict[str, str] | None = None
    custom_note: str | None = None


class ReprocessResult(BaseModel):
    """Result DTO for a published reprocessing batch."""

    batch_id: str
    entities_queued: int
    entity_pis: list[str]
    status_url: str


class ErrorResponse(BaseModel):
    """Structured error body returned by the reprocessing surface."""

    error: str
    message: str
