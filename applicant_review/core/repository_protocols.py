"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell - dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - LedgerStorage works on plain dicts: storage never sees domain dataclasses
"""

from typing import Protocol


class LedgerStorage(Protocol):
    """Durable load/save of the whole submission collection under one logical name."""

    async def load(self) -> list[dict] | None:
        """Latest saved collection, or None if nothing was ever saved."""
        ...

    async def save(self, records: list[dict], event: dict) -> None:
        """Replace the collection and append `event` to the audit log atomically."""
        ...


class GrantSink(Protocol):
    """Confers a role/permission on an applicant outside this core."""

    async def grant(self, applicant_id: str, role_id: str) -> bool: ...

    async def aclose(self) -> None: ...


class QuestionSetProvider(Protocol):
    """Ordered interview prompts. Truncation to 15 is the engine's job."""

    def get_questions(self) -> list[str]: ...
