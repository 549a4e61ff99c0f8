"""Review Schemas - Pydantic models with field-level validation for API boundaries.

Invariants:
    - Identifiers are non-empty, stripped strings of at most 128 characters
    - Free-text submission fields are capped at 4000 characters
    - PageMove.delta is exactly -1 or +1

Design Decisions:
    - Literal type for delta and event names: Pydantic handles validation natively
    - Schemas only shape requests; review rules stay in core/
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

_ID = Field(min_length=1, max_length=128)


class _Stripped(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class FactionChoice(_Stripped):
    """Applicant picked a faction before opening the form."""
    faction: str = Field(min_length=1, max_length=64)


class SubmissionCreate(_Stripped):
    """A posted application form."""
    applicant_id: str = _ID
    submission_ref: str = _ID
    faction: str | None = Field(None, max_length=64)
    identity: str | None = Field(None, max_length=4000)
    background: str | None = Field(None, max_length=4000)
    objectives: str | None = Field(None, max_length=4000)
    experience: str | None = Field(None, max_length=4000)
    attributes: dict[str, str] = Field(default_factory=dict)

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(
            exclude={"applicant_id", "submission_ref"}, exclude_none=True,
        )


class DecisionCreate(_Stripped):
    """Form review verdict."""
    reviewer_id: str = _ID
    decision: Literal["accepted", "rejected"]


class ReviewerAction(_Stripped):
    """Any action that only needs the acting reviewer."""
    reviewer_id: str = _ID


class InterviewStart(_Stripped):
    target_applicant_id: str = _ID
    reviewer_id: str = _ID
    session_id: str | None = Field(None, min_length=1, max_length=128)


class InterviewAnswer(_Stripped):
    reviewer_id: str = _ID
    question_index: int = Field(ge=0)  # upper bound checked by the engine
    value: bool


class PageMove(_Stripped):
    reviewer_id: str = _ID
    delta: Literal[-1, 1]


class ReviewEvent(BaseModel):
    """Generic event envelope for adapters that forward raw platform events."""
    event: str = Field(min_length=1, max_length=64)
    payload: dict[str, Any] = Field(default_factory=dict)
    execute_side_effects: bool = True
