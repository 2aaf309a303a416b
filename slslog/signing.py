"""
SLS request signing.

The service recomputes the signature from the same canonical string, so every
byte here matters:

    METHOD
    CONTENT-MD5
    CONTENT-TYPE
    DATE
    CANONICALIZED-HEADERS
    CANONICALIZED-RESOURCE

The six fields are positional; empty fields still contribute their newline.
"""

import base64
import hashlib
import hmac
from collections.abc import Mapping
from typing import Any

SIGNATURE_SCHEME = "LOG"
CANONICAL_HEADER_PREFIXES = ("x-log-", "x-acs-")


def format_value(value: Any) -> str:
    """Render a query value the way the service expects it in the sign string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Index headers by lowercased name. Later duplicates win."""
    return {name.lower(): value for name, value in headers.items()}


def canonicalize_headers(headers: Mapping[str, str]) -> str:
    normalized = normalize_headers(headers)
    names = sorted(
        name for name in normalized if name.startswith(CANONICAL_HEADER_PREFIXES)
    )
    return "\n".join(f"{name}:{normalized[name].strip()}" for name in names)


def canonicalize_resource(path: str, queries: Mapping[str, Any] | None = None) -> str:
    """Path plus sorted, unencoded ``key=value`` query pairs."""
    if not queries:
        return path

    query_str = "&".join(f"{key}={format_value(queries[key])}" for key in sorted(queries))
    return f"{path}?{query_str}"


def build_sign_string(method: str, resource: str, headers: Mapping[str, str]) -> str:
    normalized = normalize_headers(headers)
    return "\n".join(
        [
            method.upper(),
            normalized.get("content-md5", ""),
            normalized.get("content-type", ""),
            normalized.get("date", ""),
            canonicalize_headers(normalized),
            resource,
        ]
    )


def sign(
    method: str,
    resource: str,
    headers: Mapping[str, str],
    access_key_id: str,
    access_key_secret: str,
) -> str:
    """
    Compute the ``authorization`` header value for a request.

    Args:
        method: HTTP method
        resource: Canonicalized resource (see canonicalize_resource)
        headers: Headers that will be sent with the request
        access_key_id: Access key id placed in the header
        access_key_secret: Key for the HMAC-SHA1 digest

    Returns:
        "LOG <access_key_id>:<base64 signature>"
    """
    sign_string = build_sign_string(method, resource, headers)
    digest = hmac.new(
        access_key_secret.encode("utf-8"),
        sign_string.encode("utf-8"),
        hashlib.sha1,
    ).digest()
    signature = base64.b64encode(digest).decode("ascii")
    return f"{SIGNATURE_SCHEME} {access_key_id}:{signature}"


def content_md5(body: bytes) -> str:
    """Uppercase hex MD5 of the request body."""
    return hashlib.md5(body).hexdigest().upper()
