"""
Signed HTTP exchange with the SLS API.

Each call builds its headers, signs them, opens a short-lived httpx client and
interprets the response. There is no retry and no connection reuse.
"""

import asyncio
import logging
from collections.abc import Mapping
from email.utils import formatdate
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from .config import RequestConfig, RequestOptions
from .errors import SLSLogError, SLSTimeoutError
from .signing import canonicalize_resource, content_md5, format_value, sign

logger = logging.getLogger(__name__)

API_VERSION = "0.6.0"
SIGNATURE_METHOD = "hmac-sha1"


def build_query_string(queries: Mapping[str, Any] | None) -> str:
    if not queries:
        return ""
    pairs = [(key, format_value(value)) for key, value in queries.items()]
    return "?" + urlencode(pairs, quote_via=quote)


def build_url(
    scheme: str,
    endpoint: str,
    path: str,
    queries: Mapping[str, Any] | None = None,
    project_name: str | None = None,
) -> str:
    host = f"{project_name}.{endpoint}" if project_name else endpoint
    return f"{scheme}://{host}{path}{build_query_string(queries)}"


class Request:
    """Signs and executes requests against one SLS endpoint."""

    def __init__(
        self,
        config: RequestConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            config: Endpoint, credentials and HTTP defaults
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.config = config
        self._transport = transport

    def update_credential(
        self,
        access_key_id: str,
        access_key_secret: str,
        security_token: str | None = None,
    ):
        """Rotate credentials in place. Not atomic; see RequestConfig."""
        self.config.update_credential(access_key_id, access_key_secret, security_token)

    def build_headers(
        self,
        method: str,
        path: str,
        queries: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> dict[str, str]:
        """Default headers merged with caller headers, body digests and signature."""
        merged = {
            "content-type": "application/json",
            "date": formatdate(usegmt=True),
            "x-log-apiversion": API_VERSION,
            "x-log-signaturemethod": SIGNATURE_METHOD,
        }
        for name, value in (headers or {}).items():
            merged[name.lower()] = value

        if self.config.security_token:
            merged["x-acs-security-token"] = self.config.security_token

        if body is not None:
            merged["content-length"] = str(len(body))
            merged["content-md5"] = content_md5(body)

        merged["authorization"] = sign(
            method,
            canonicalize_resource(path, queries),
            merged,
            self.config.access_key_id,
            self.config.access_key_secret,
        )
        return merged

    async def execute(
        self,
        method: str,
        path: str,
        queries: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
        project_name: str | None = None,
        request_options: RequestOptions | None = None,
    ) -> Any:
        """
        Sign and send a request, then interpret the response.

        Returns:
            Parsed JSON body, or raw bytes for non-JSON responses.

        Raises:
            SLSLogError: The service returned an error-shaped JSON body
            SLSTimeoutError: The exchange exceeded the configured timeout
        """
        method = method.upper()
        request_headers = self.build_headers(method, path, queries, headers, body)
        url = build_url(self.config.scheme, self.config.endpoint, path, queries, project_name)
        options = self.config.resolve_options(request_options)

        logger.debug(f"SLS request: {method} {url}")

        try:
            async with asyncio.timeout(options.timeout):
                async with httpx.AsyncClient(
                    transport=self._transport,
                    timeout=options.timeout,
                    follow_redirects=bool(options.follow_redirects),
                    **options.client_kwargs,
                ) as client:
                    response = await client.request(
                        method,
                        url,
                        content=body,
                        headers=request_headers,
                    )
        except (TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"SLS request timed out after {options.timeout}s: {method} {url}")
            raise SLSTimeoutError(options.timeout, url) from e

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if not content_type.startswith("application/json"):
            return response.content

        try:
            body = response.json()
        except ValueError:
            # Empty or malformed body under a JSON content type
            return response.content
        if not isinstance(body, dict):
            return body

        if body.get("errorCode") and body.get("errorMessage"):
            error = SLSLogError(
                body["errorMessage"],
                body["errorCode"],
                response.headers.get("x-log-requestid"),
            )
            logger.warning(f"SLS error response ({response.status_code}): {error}")
            raise error

        if body.get("Error"):
            detail = body["Error"]
            if isinstance(detail, dict):
                error = SLSLogError(
                    detail.get("Message", ""),
                    detail.get("Code", ""),
                    detail.get("RequestId"),
                )
            else:
                error = SLSLogError(str(detail), "", response.headers.get("x-log-requestid"))
            logger.warning(f"SLS error response ({response.status_code}): {error}")
            raise error

        return body
