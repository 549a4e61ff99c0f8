"""Side Effect Runner - executes coordinator side effects against the outside world.

Invariants:
    - GrantRole resolves its GrantTarget to a configured role id, then calls the GrantSink once
    - A grant whose role id is not configured is skipped and logged, never raised
    - Grant failures are logged and reported, not retried
    - Notify is emitted as a structured log line for the presentation layer's log channel
    - Never raises: one failing effect does not stop the following ones
"""

import logging
from dataclasses import dataclass

from applicant_review.core.domain_types import GrantTarget
from applicant_review.core.repository_protocols import GrantSink
from applicant_review.core.side_effects import GrantRole, Notify, SideEffect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectReport:
    """What happened to one side effect."""
    effect: SideEffect
    delivered: bool
    detail: str | None = None

    def to_dict(self) -> dict:
        return {
            "effect": self.effect.to_dict(),
            "delivered": self.delivered,
            "detail": self.detail,
        }


class SideEffectRunner:
    """Performs GrantRole / Notify effects in order."""

    def __init__(self, sink: GrantSink, role_ids: dict[GrantTarget, str | None]):
        self._sink = sink
        self._role_ids = role_ids

    async def run(self, effects: list[SideEffect]) -> list[EffectReport]:
        reports = []
        for effect in effects:
            if isinstance(effect, GrantRole):
                reports.append(await self._grant(effect))
            elif isinstance(effect, Notify):
                reports.append(self._notify(effect))
        return reports

    async def _grant(self, effect: GrantRole) -> EffectReport:
        role_id = self._role_ids.get(effect.target)
        if not role_id:
            logger.warning(
                f"No role configured for '{effect.target.value}', grant skipped",
                extra={"applicant_id": effect.applicant_id},
            )
            return EffectReport(effect, False, "ROLE_NOT_CONFIGURED")
        try:
            ok = await self._sink.grant(effect.applicant_id, role_id)
        except Exception as e:
            logger.error(
                f"Grant sink crashed: {e}", exc_info=True,
                extra={"applicant_id": effect.applicant_id, "role_id": role_id},
            )
            ok = False
        if not ok:
            logger.error(
                "Role grant failed",
                extra={"applicant_id": effect.applicant_id, "role_id": role_id},
            )
            return EffectReport(effect, False, "GRANT_FAILED")
        return EffectReport(effect, True)

    def _notify(self, effect: Notify) -> EffectReport:
        logger.info(
            f"[{effect.kind.value}] {effect.details}" if effect.details else f"[{effect.kind.value}]",
            extra={
                "kind": effect.kind.value,
                "applicant_id": effect.applicant_id,
                "reviewer_id": effect.reviewer_id,
            },
        )
        return EffectReport(effect, True)
