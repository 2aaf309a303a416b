"""
Exceptions raised by the SLS log SDK.
"""


class SLSError(Exception):
    """Base class for all SDK errors."""


class SLSLogError(SLSError):
    """
    Error reported by the SLS service.

    Raised when a JSON response carries either an ``errorCode``/``errorMessage``
    pair or an ``Error`` object with ``Code``/``Message``/``RequestId``.
    """

    def __init__(self, message: str, code: str, request_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.request_id = request_id

    @property
    def name(self) -> str:
        return f"{self.code}Error"

    def __str__(self) -> str:
        if self.request_id:
            return f"{self.code}: {self.message} (request id {self.request_id})"
        return f"{self.code}: {self.message}"


class SLSTimeoutError(SLSError, TimeoutError):
    """The HTTP exchange did not complete within its timeout."""

    def __init__(self, timeout: float, url: str | None = None):
        message = f"Request timed out after {timeout}s"
        if url:
            message = f"{message}: {url}"
        super().__init__(message)
        self.timeout = timeout
        self.url = url


class SLSConfigError(SLSError, ValueError):
    """Required client configuration is missing or invalid."""
