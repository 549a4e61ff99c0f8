"""Grant Sinks - deliver role grants to the platform adapter.

Invariants:
    - grant() never raises: every failure is logged and reported as False
    - No automatic retry; the caller decides what to do with False
    - HttpGrantSink posts {"userId", "role"} - the role endpoint contract of the
      platform adapter

Design Decisions:
    - httpx.AsyncClient injected or owned: tests pass a MockTransport-backed client
    - LoggingGrantSink used when no endpoint is configured (local runs, tests)
"""

import logging

import httpx

logger = logging.getLogger(__name__)


class HttpGrantSink:
    """POSTs role grants to the platform adapter's HTTP endpoint."""

    def __init__(
        self,
        endpoint_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._endpoint_url = endpoint_url
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._owns_client = client is None

    async def grant(self, applicant_id: str, role_id: str) -> bool:
        try:
            response = await self._client.post(
                self._endpoint_url, json={"userId": applicant_id, "role": role_id},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Grant rejected with HTTP {e.response.status_code}",
                extra={"applicant_id": applicant_id, "role_id": role_id},
            )
            return False
        except httpx.HTTPError as e:
            logger.error(
                f"Grant request failed: {e}",
                extra={"applicant_id": applicant_id, "role_id": role_id},
            )
            return False
        logger.info("Role granted", extra={"applicant_id": applicant_id, "role_id": role_id})
        return True

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class LoggingGrantSink:
    """Records grants in the log only."""

    def __init__(self) -> None:
        self.granted: list[tuple[str, str]] = []

    async def grant(self, applicant_id: str, role_id: str) -> bool:
        self.granted.append((applicant_id, role_id))
        logger.info(
            "Role grant recorded (no endpoint configured)",
            extra={"applicant_id": applicant_id, "role_id": role_id},
        )
        return True

    async def aclose(self) -> None:
        return None
