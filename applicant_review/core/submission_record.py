"""Submission Record - one ledger entry per (applicant_id, submission_ref).

Invariants:
    - (applicant_id, submission_ref) is the natural key; both are non-empty strings
    - submitted_at is set once and never overwritten by a later merge
    - status None means pending
    - All timestamps are timezone-aware UTC
    - to_dict()/from_dict() are exact inverses for every populated field

Design Decisions:
    - Dataclass, not ORM row: the whole collection is one JSON document in storage
    - Unknown submission fields kept in `attributes` instead of being dropped
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any, Mapping

from applicant_review.core.domain_types import DecisionStage, SubmissionStatus
from applicant_review.core.errors import InvalidInputError

KEY_FIELDS = ("applicant_id", "submission_ref")
TIMESTAMP_FIELDS = ("submitted_at", "decided_at", "granted_at")


def parse_timestamp(value: Any) -> datetime | None:
    """Coerce ISO strings / datetimes into aware UTC datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise InvalidInputError(
                f"Invalid timestamp: {value!r}", "INVALID_DATE",
            )
    else:
        raise InvalidInputError(
            f"Invalid timestamp type: {type(value).__name__}", "INVALID_DATE",
        )
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class SubmissionRecord:
    """Ledger entry. Mutated in place by decisions and grants, never deleted."""

    applicant_id: str
    submission_ref: str | None = None

    # Submission (captured once)
    submitted_at: datetime | None = None
    faction: str | None = None
    identity: str | None = None
    background: str | None = None
    objectives: str | None = None
    experience: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)

    # Decision
    status: SubmissionStatus | None = None
    decided_at: datetime | None = None
    reviewer_id: str | None = None
    stage: DecisionStage | None = None

    # Final grant
    granted_at: datetime | None = None
    granted_by: str | None = None

    @property
    def key(self) -> tuple[str, str | None]:
        return (self.applicant_id, self.submission_ref)

    @property
    def is_pending(self) -> bool:
        return self.status is None

    @property
    def is_treated(self) -> bool:
        return self.status in (SubmissionStatus.ACCEPTED, SubmissionStatus.REJECTED)

    @property
    def activity_at(self) -> datetime | None:
        """Timestamp used to pick an applicant's latest record."""
        return self.submitted_at or self.decided_at or self.granted_at

    def merged_with(self, entry: Mapping[str, Any]) -> "SubmissionRecord":
        """Return a copy with entry's fields applied (entry wins, except submitted_at)."""
        incoming = record_fields_from_entry(entry)
        attributes = {**self.attributes, **incoming.pop("attributes", {})}
        if self.submitted_at is not None:
            incoming.pop("submitted_at", None)
        return replace(self, attributes=attributes, **incoming)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON document. Unset fields are omitted."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or (f.name == "attributes" and not value):
                continue
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, (SubmissionStatus, DecisionStage)):
                value = value.value
            elif f.name == "attributes":
                value = dict(value)
            out[f.name] = value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SubmissionRecord":
        values = record_fields_from_entry(data)
        return cls(applicant_id=str(data["applicant_id"]), **values)


_KNOWN_FIELDS = {f.name for f in fields(SubmissionRecord)} - {"applicant_id"}


def validate_key(entry: Mapping[str, Any]) -> tuple[str, str]:
    """Both key fields must be present, non-empty strings."""
    for name in KEY_FIELDS:
        value = entry.get(name)
        if not isinstance(value, str) or not value.strip():
            raise InvalidInputError(
                f"Submission entry requires a non-empty '{name}'",
                "MISSING_KEY", field=name,
            )
    return entry["applicant_id"], entry["submission_ref"]


def record_fields_from_entry(entry: Mapping[str, Any]) -> dict[str, Any]:
    """Map a loose entry dict onto typed SubmissionRecord keyword arguments.

    Fields absent from the entry (or None) are left out so a merge leaves
    them untouched. Unrecognized keys are collected into `attributes`.
    """
    values: dict[str, Any] = {}
    attributes: dict[str, str] = {}
    for name, value in entry.items():
        if name == "applicant_id":
            continue
        if name not in _KNOWN_FIELDS:
            if value is not None:
                attributes[name] = str(value)
            continue
        if value is None:
            continue
        if name in TIMESTAMP_FIELDS:
            values[name] = parse_timestamp(value)
        elif name in ("status", "stage"):
            enum_type = SubmissionStatus if name == "status" else DecisionStage
            try:
                values[name] = enum_type(value)
            except ValueError:
                raise InvalidInputError(
                    f"Unknown {name}: {value!r}", f"INVALID_{name.upper()}",
                    field=name,
                )
        elif name == "attributes":
            attributes.update({k: str(v) for k, v in dict(value).items()})
        else:
            values[name] = str(value)
    if attributes:
        values["attributes"] = attributes
    return values
