"""
SLS log SDK - write and query logs in an SLS logstore.

This package provides:
- SLSLogClient: put_logs / get_logs against a project's logstores
- Request: signed HTTP exchange shared by all API calls
- signing: canonicalization and HMAC-SHA1 request signatures
- encoding: protobuf LogGroup payloads

Example:
    from slslog import LogData, SLSLogClient, create_log

    client = SLSLogClient.from_env()
    await client.put_logs(
        "my-project",
        "my-logstore",
        LogData(logs=[create_log({"message": "Service started"})]),
    )
"""

from .client import SLSLogClient
from .config import RequestConfig, RequestOptions, from_env
from .encoding import create_log, decode_log_group, encode_log_group, split_timestamp
from .errors import SLSConfigError, SLSError, SLSLogError, SLSTimeoutError
from .models import GetLogsQuery, LogData, LogEntity, QueriedLog
from .request import Request
from .signing import canonicalize_headers, canonicalize_resource, sign

__all__ = [
    # Client
    "SLSLogClient",
    "Request",
    "RequestConfig",
    "RequestOptions",
    "from_env",
    # Models
    "LogEntity",
    "LogData",
    "GetLogsQuery",
    "QueriedLog",
    "create_log",
    # Encoding and signing
    "encode_log_group",
    "decode_log_group",
    "split_timestamp",
    "sign",
    "canonicalize_headers",
    "canonicalize_resource",
    # Errors
    "SLSError",
    "SLSLogError",
    "SLSTimeoutError",
    "SLSConfigError",
]

__version__ = "1.0.0"
