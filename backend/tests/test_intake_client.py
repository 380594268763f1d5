"""
PAWhere Client — Intake API Client Tests
==========================================

What:  Tests for IntakeApiClient's request headers and error mapping.
Why:   The form's notices depend on telling "server said no" apart from
       "server never answered".
How:   httpx.MockTransport stands in for the network.

What we test:
    ✅ Successful POST returns the decoded body with tracing headers sent
    ✅ 409 / 400 / 500 become ApiResponseError with the server message
    ✅ Connection failures, timeouts and stalled exchanges become
       TransientNetworkError
"""

import asyncio
import json

import httpx
import pytest

from pawhere.client.api import IntakeApiClient
from pawhere.exceptions import ApiResponseError, TransientNetworkError


def make_client(handler, **kwargs):
    return IntakeApiClient(
        base_url="http://test",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestRegister:

    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "message": "Registration successful",
                    "registration": {"id": "1", "email": "a@b.com", "isVip": False},
                },
            )

        async with make_client(handler, device_type="mobile") as api:
            body = await api.register({"email": "a@b.com"})

        assert body["message"] == "Registration successful"
        assert seen["method"] == "POST"
        assert seen["path"] == "/api/register"
        assert seen["body"] == {"email": "a@b.com"}
        assert seen["headers"]["X-Device-Type"] == "mobile"
        assert seen["headers"]["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_duplicate_email(self):
        def handler(request):
            return httpx.Response(
                409,
                json={"message": "Email already registered", "error": "DUPLICATE_EMAIL"},
            )

        async with make_client(handler) as api:
            with pytest.raises(ApiResponseError) as exc_info:
                await api.register({"email": "a@b.com"})

        assert exc_info.value.status_code == 409
        assert exc_info.value.is_duplicate_email
        assert exc_info.value.message == "Email already registered"

    @pytest.mark.asyncio
    async def test_validation_error_body_is_kept(self):
        def handler(request):
            return httpx.Response(
                400,
                json={
                    "message": "Invalid registration data",
                    "errors": [{"path": "email", "message": "value is not a valid email address", "code": "value_error"}],
                },
            )

        async with make_client(handler) as api:
            with pytest.raises(ApiResponseError) as exc_info:
                await api.register({"email": "nope"})

        assert exc_info.value.is_duplicate_email is False
        assert exc_info.value.body["errors"][0]["path"] == "email"

    @pytest.mark.asyncio
    async def test_non_json_error(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        async with make_client(handler) as api:
            with pytest.raises(ApiResponseError) as exc_info:
                await api.register({"email": "a@b.com"})

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as api:
            with pytest.raises(TransientNetworkError) as exc_info:
                await api.register({"email": "a@b.com"})

        assert exc_info.value.message == "Network error - check your connection"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler) as api:
            with pytest.raises(TransientNetworkError) as exc_info:
                await api.register({"email": "a@b.com"})

        assert exc_info.value.context["reason"] == "timeout"

    @pytest.mark.asyncio
    async def test_whole_exchange_is_bounded(self):
        """A server that stalls past the deadline counts as a network error."""
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(201, json={})

        async with make_client(handler, timeout=0.05) as api:
            with pytest.raises(TransientNetworkError) as exc_info:
                await api.register({"email": "a@b.com"})

        assert exc_info.value.context["reason"] == "timeout"


class TestConfiguration:

    @pytest.mark.asyncio
    async def test_defaults_from_settings(self):
        api = IntakeApiClient()
        try:
            assert api.timeout == 30.0
            assert api.base_url == "http://test"
            assert api.device_type == "desktop"
        finally:
            await api.aclose()
