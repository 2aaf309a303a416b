"""
Client configuration for the SLS log SDK.

RequestConfig is owned by a client for its lifetime. Credential fields may be
rotated in place with update_credential(); the update is not atomic, so callers
sharing a client across tasks must serialize their own updates.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any

from .errors import SLSConfigError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0  # seconds
DEFAULT_SCHEME = "https"
RESERVED_CLIENT_KWARGS = frozenset({"transport", "timeout", "follow_redirects"})


@dataclass
class RequestOptions:
    """HTTP options that can be overridden per client or per call."""

    timeout: float | None = None  # seconds
    follow_redirects: bool | None = None
    # Extra httpx.AsyncClient arguments (proxy, limits, verify, ...)
    client_kwargs: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        reserved = RESERVED_CLIENT_KWARGS.intersection(self.client_kwargs)
        if reserved:
            raise SLSConfigError(f"client_kwargs cannot set {sorted(reserved)}; use the dedicated fields")

    def merge(self, override: "RequestOptions | None") -> "RequestOptions":
        """Return a copy with every field set on ``override`` taking precedence."""
        if override is None:
            return replace(self, client_kwargs=dict(self.client_kwargs))
        return RequestOptions(
            timeout=override.timeout if override.timeout is not None else self.timeout,
            follow_redirects=(
                override.follow_redirects
                if override.follow_redirects is not None
                else self.follow_redirects
            ),
            client_kwargs={**self.client_kwargs, **override.client_kwargs},
        )


DEFAULT_REQUEST_OPTIONS = RequestOptions(timeout=DEFAULT_TIMEOUT, follow_redirects=False)


@dataclass
class RequestConfig:
    """Endpoint, credentials and HTTP defaults for one client."""

    endpoint: str
    access_key_id: str
    access_key_secret: str
    security_token: str | None = None
    request_options: RequestOptions = field(default_factory=RequestOptions)
    scheme: str = DEFAULT_SCHEME

    def __post_init__(self):
        if self.scheme not in ("http", "https"):
            raise SLSConfigError(f"Unsupported scheme: {self.scheme!r}")
        # Accept endpoints pasted with a scheme or trailing slash
        for prefix in ("https://", "http://"):
            if self.endpoint.startswith(prefix):
                self.endpoint = self.endpoint[len(prefix):]
        self.endpoint = self.endpoint.rstrip("/")

    def update_credential(
        self,
        access_key_id: str,
        access_key_secret: str,
        security_token: str | None = None,
    ):
        """
        Replace the access key pair and security token.

        Fields are assigned one after another; a request signed concurrently
        may observe a mix of old and new values.
        """
        self.access_key_id = access_key_id
        self.access_key_secret = access_key_secret
        self.security_token = security_token
        logger.info(f"Credentials rotated for access key {access_key_id}")

    def resolve_options(self, per_call: RequestOptions | None = None) -> RequestOptions:
        """Apply precedence: per-call > per-client > defaults."""
        return DEFAULT_REQUEST_OPTIONS.merge(self.request_options).merge(per_call)


def from_env() -> RequestConfig:
    """
    Create a RequestConfig from environment variables.

    Environment variables:
        SLS_ENDPOINT: Service endpoint host (required)
        SLS_ACCESS_KEY_ID: Access key id (required)
        SLS_ACCESS_KEY_SECRET: Access key secret (required)
        SLS_SECURITY_TOKEN: STS security token (optional)
        SLS_SCHEME: "http" or "https" (optional, default https)
        SLS_TIMEOUT: Request timeout in seconds (optional)

    Returns:
        Configured RequestConfig instance
    """
    endpoint = os.environ.get("SLS_ENDPOINT")
    access_key_id = os.environ.get("SLS_ACCESS_KEY_ID")
    access_key_secret = os.environ.get("SLS_ACCESS_KEY_SECRET")

    if not endpoint:
        raise SLSConfigError("SLS_ENDPOINT environment variable required")
    if not access_key_id:
        raise SLSConfigError("SLS_ACCESS_KEY_ID environment variable required")
    if not access_key_secret:
        raise SLSConfigError("SLS_ACCESS_KEY_SECRET environment variable required")

    options = RequestOptions()
    timeout = os.environ.get("SLS_TIMEOUT")
    if timeout:
        try:
            options.timeout = float(timeout)
        except ValueError as e:
            raise SLSConfigError(f"SLS_TIMEOUT must be a number, got {timeout!r}") from e

    return RequestConfig(
        endpoint=endpoint,
        access_key_id=access_key_id,
        access_key_secret=access_key_secret,
        security_token=os.environ.get("SLS_SECURITY_TOKEN") or None,
        request_options=options,
        scheme=os.environ.get("SLS_SCHEME", DEFAULT_SCHEME),
    )
