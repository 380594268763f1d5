"""
PAWhere Client — Intake API Client
====================================

What:  Async HTTP client the survey form submits registrations through.
Why:   Separates "the server said no" (ApiResponseError, with status and
       body) from "the server was never reached" (TransientNetworkError),
       so the form can word its notices differently.
How:   httpx.AsyncClient with a bounded timeout. Every request carries an
       X-Request-ID, which the API echoes and logs, and an X-Device-Type.

Timeout:
    Mobile networks stall; after submit_timeout_seconds (30 s by default)
    the submission is abandoned and reported as a network error. There is
    no cancellation on the server side: an abandoned request finishes or
    fails there on its own.
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Dict, Optional

import httpx

from pawhere.config import settings
from pawhere.exceptions import ApiResponseError, TransientNetworkError

logger = logging.getLogger(__name__)


def _request_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def _decode(response: httpx.Response) -> Dict[str, Any]:
    """Parse a JSON object body; fall back to the raw text as the message."""
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text or response.reason_phrase}
    if isinstance(body, dict):
        return body
    return {"data": body}


class IntakeApiClient:
    """
    Usage:
        async with IntakeApiClient() as api:
            await api.register({"email": "owner@pawhere.io", "phone": "123"})
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        device_type: str = "desktop",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.api_base_url
        self.timeout = timeout if timeout is not None else settings.submit_timeout_seconds
        self.device_type = device_type
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "IntakeApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Raises:
            TransientNetworkError: connection failure or timeout
            ApiResponseError: any 4xx/5xx answer
        """
        rid = _request_id()
        headers = {"X-Request-ID": rid, "X-Device-Type": self.device_type}
        if data is not None:
            logger.debug("[%s] %s %s keys=%s", rid, method, path, sorted(data))

        try:
            # httpx timeouts are per phase; wait_for bounds the whole exchange
            response = await asyncio.wait_for(
                self._client.request(method, path, json=data, headers=headers),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning("[%s] %s %s timed out after %.0fs", rid, method, path, self.timeout)
            raise TransientNetworkError(context={"request_id": rid, "reason": "timeout"}) from e
        except httpx.TransportError as e:
            logger.warning("[%s] %s %s failed: %s", rid, method, path, str(e))
            raise TransientNetworkError(
                context={"request_id": rid, "reason": type(e).__name__}
            ) from e

        body = _decode(response)
        if response.is_error:
            logger.info("[%s] %s %s → %d", rid, method, path, response.status_code)
            raise ApiResponseError(
                status_code=response.status_code,
                body=body,
                context={"request_id": rid},
            )
        return body

    async def register(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST /api/register; returns {message, registration}."""
        return await self.request("POST", "/api/register", payload)
