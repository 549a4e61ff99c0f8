"""Faction Choices - pending faction picked by an applicant before the form is posted.

Invariants:
    - At most one pending choice per applicant; a new choice replaces the old one
    - consume() removes the choice; absent choice yields UNSPECIFIED_FACTION
"""

import threading

from applicant_review.core.domain_types import UNSPECIFIED_FACTION
from applicant_review.core.errors import InvalidInputError


class FactionChoices:
    """Owned registry of pending faction choices."""

    def __init__(self) -> None:
        self._choices: dict[str, str] = {}
        self._lock = threading.Lock()

    def choose(self, applicant_id: str, faction: str) -> None:
        if not isinstance(faction, str) or not faction.strip():
            raise InvalidInputError(
                "Faction must be a non-empty string", "INVALID_FACTION",
                field="faction",
            )
        with self._lock:
            self._choices[applicant_id] = faction.strip()

    def peek(self, applicant_id: str) -> str | None:
        with self._lock:
            return self._choices.get(applicant_id)

    def consume(self, applicant_id: str) -> str:
        with self._lock:
            return self._choices.pop(applicant_id, UNSPECIFIED_FACTION)
