"""Pytest configuration and shared fixtures for SLS log SDK tests."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from slslog import RequestConfig, SLSLogClient


@pytest.fixture
def request_config() -> RequestConfig:
    """Return a config pointing at a fake endpoint."""
    return RequestConfig(
        endpoint="cn-test.log.example.com",
        access_key_id="test-key-id",
        access_key_secret="test-key-secret",
    )


@pytest.fixture
def captured_requests() -> list[httpx.Request]:
    """Requests seen by the mock transport, in order."""
    return []


@pytest.fixture
def mock_transport(captured_requests) -> Callable[..., httpx.MockTransport]:
    """Build an httpx.MockTransport that records requests and returns a canned response."""

    def factory(
        json_body=None,
        status_code: int = 200,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            captured_requests.append(request)
            if json_body is not None:
                return httpx.Response(status_code, json=json_body, headers=headers)
            return httpx.Response(status_code, content=content or b"", headers=headers)

        return httpx.MockTransport(handler)

    return factory


@pytest.fixture
def sls_client(mock_transport) -> Callable[..., SLSLogClient]:
    """Build a client wired to a mock transport."""

    def factory(**transport_kwargs) -> SLSLogClient:
        return SLSLogClient(
            endpoint="cn-test.log.example.com",
            access_key_id="test-key-id",
            access_key_secret="test-key-secret",
            transport=mock_transport(**transport_kwargs),
        )

    return factory
