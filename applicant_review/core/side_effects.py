"""Side Effects - descriptors of actions the caller must perform after a review event.

Invariants:
    - Side effects are data: creating one performs nothing
    - GrantRole names a GrantTarget; the runner resolves it to a configured role id
    - Notify carries only opaque ids and plain values (serializable as JSON)
"""

from dataclasses import dataclass, field
from typing import Any

from applicant_review.core.domain_types import GrantTarget, NotificationKind


@dataclass(frozen=True)
class GrantRole:
    """Confer a role on an applicant."""
    applicant_id: str
    target: GrantTarget

    def to_dict(self) -> dict:
        return {
            "type": "grant_role",
            "applicant_id": self.applicant_id,
            "target": self.target.value,
        }


@dataclass(frozen=True)
class Notify:
    """Tell the presentation layer something happened."""
    kind: NotificationKind
    applicant_id: str
    reviewer_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": "notify",
            "kind": self.kind.value,
            "applicant_id": self.applicant_id,
            "reviewer_id": self.reviewer_id,
            "details": dict(self.details),
        }


SideEffect = GrantRole | Notify
