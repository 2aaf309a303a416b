"""
SLS log client - write and query logs in a logstore.

Usage:
    from slslog import GetLogsQuery, LogData, LogEntity, SLSLogClient

    client = SLSLogClient(
        endpoint="cn-hangzhou.log.aliyuncs.com",
        access_key_id="LTAI...",
        access_key_secret="...",
    )

    await client.put_logs(
        "my-project",
        "my-logstore",
        LogData(logs=[LogEntity(content={"event": "payment_completed"})], topic="billing"),
    )

    rows = await client.get_logs(
        "my-project",
        "my-logstore",
        GetLogsQuery(**{"from": 1700000000, "to": 1700003600, "query": "status: 500"}),
    )
"""

import logging
from typing import Any

import httpx

from .config import RequestConfig, RequestOptions, from_env
from .encoding import encode_log_group, split_timestamp
from .models import GetLogsQuery, LogData, QueriedLog
from .request import Request

logger = logging.getLogger(__name__)


class SLSLogClient(Request):
    """Client for the SLS log write and query APIs."""

    def __init__(
        self,
        endpoint: str,
        access_key_id: str,
        access_key_secret: str,
        security_token: str | None = None,
        request_options: RequestOptions | None = None,
        scheme: str = "https",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            endpoint: Region endpoint host (e.g. "cn-hangzhou.log.aliyuncs.com")
            access_key_id: Access key id
            access_key_secret: Access key secret
            security_token: Optional STS token
            request_options: Per-client HTTP overrides
            scheme: "https" (default) or "http"
            transport: Optional httpx transport
        """
        config = RequestConfig(
            endpoint=endpoint,
            access_key_id=access_key_id,
            access_key_secret=access_key_secret,
            security_token=security_token,
            request_options=request_options or RequestOptions(),
            scheme=scheme,
        )
        super().__init__(config, transport=transport)

    @classmethod
    def from_config(
        cls,
        config: RequestConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SLSLogClient":
        return cls(
            endpoint=config.endpoint,
            access_key_id=config.access_key_id,
            access_key_secret=config.access_key_secret,
            security_token=config.security_token,
            request_options=config.request_options,
            scheme=config.scheme,
            transport=transport,
        )

    @classmethod
    def from_env(cls, transport: httpx.AsyncBaseTransport | None = None) -> "SLSLogClient":
        """Create a client from SLS_* environment variables (see config.from_env)."""
        return cls.from_config(from_env(), transport=transport)

    async def put_logs(
        self,
        project_name: str,
        logstore_name: str,
        data: LogData,
        request_options: RequestOptions | None = None,
    ) -> None:
        """
        Write a group of logs to a logstore.

        Raises:
            SLSLogError: The service rejected the write
            SLSTimeoutError: The write did not complete in time
        """
        body = encode_log_group(data)

        await self.execute(
            "POST",
            f"/logstores/{logstore_name}/shards/lb",
            headers={
                "x-log-bodyrawsize": str(len(body)),
                "content-type": "application/x-protobuf",
            },
            body=body,
            project_name=project_name,
            request_options=request_options,
        )
        logger.debug(f"Wrote {len(data.logs)} logs to {project_name}/{logstore_name}")

    async def get_logs(
        self,
        project_name: str,
        logstore_name: str,
        query: GetLogsQuery,
        request_options: RequestOptions | None = None,
    ) -> list[QueriedLog | dict[str, Any]]:
        """
        Query logs in a time window.

        ``from`` and ``to`` may be given in seconds or milliseconds and are
        sent as seconds.

        Returns:
            Raw result rows, each carrying __topic__, __source__, __time__
            and __time_ns_part__ alongside the log fields.
        """
        from_seconds, _ = split_timestamp(query.from_)
        to_seconds, _ = split_timestamp(query.to)

        queries: dict[str, Any] = {"type": "log"}
        queries.update(query.model_dump(by_alias=True, exclude_none=True))
        queries["from"] = from_seconds
        queries["to"] = to_seconds

        return await self.execute(
            "GET",
            f"/logstores/{logstore_name}",
            queries=queries,
            project_name=project_name,
            request_options=request_options,
        )
