"""
Built-in tools.

Ready-made tools agents can register directly:
- TimeTool: current date/time in a given time zone
- RemoteTool: forwards the call to an HTTP endpoint
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

import httpx

from ..domain.entities import Tool

logger = logging.getLogger(__name__)


class TimeTool(Tool):
    """Reports the current time.

    The zone is taken from the call's ``time_zone`` argument, then from
    the zone given at construction, then from the system.
    """

    TIME_FORMAT = "%m/%d/%Y, %I:%M:%S %p %Z"

    def __init__(self, time_zone: Optional[str] = None, name: str = "get_time"):
        super().__init__(
            name=name,
            description="Get the current time from the system",
            handler=self._current_time,
            parameters={
                "time_zone": (
                    "Optional - IANA time zone to get the time from (e.g. "
                    "'Europe/Madrid'); the system time zone is used if omitted"
                ),
            },
        )
        self.default_time_zone = time_zone

    async def _current_time(self, params: dict[str, Any]) -> str:
        zone_name = params.get("time_zone") or self.default_time_zone
        if zone_name:
            now = datetime.now(ZoneInfo(zone_name))
        else:
            now = datetime.now().astimezone()
        return now.strftime(self.TIME_FORMAT)


class RemoteTool(Tool):
    """Tool whose handler is an HTTP endpoint.

    Arguments are sent as a JSON body (or as query parameters for GET).
    The response body is returned as text whatever the status code, so the
    backend sees error pages too.

    Usage:
        weather = RemoteTool(
            "get_weather",
            description="Current weather for a city",
            url="https://api.example.com/weather",
            method="GET",
            parameters={"city": "City to look up"},
        )
        agent.tool(weather)
    """

    def __init__(
        self,
        name: str,
        description: str,
        url: str,
        method: str = "POST",
        headers: Optional[dict[str, str]] = None,
        parameters: Optional[dict[str, str]] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(
            name=name,
            description=description,
            handler=self._request,
            parameters=dict(parameters or {}),
        )
        self.url = url
        self.method = method.upper()
        self.headers = dict(headers or {})
        self.timeout = timeout
        self._client = client

    async def _request(self, params: dict[str, Any]) -> str:
        request_kwargs: dict[str, Any] = {"headers": self.headers}
        if self.method == "GET":
            request_kwargs["params"] = params
        else:
            request_kwargs["json"] = params

        logger.debug(f"RemoteTool {self.name}: {self.method} {self.url}")

        if self._client is not None:
            response = await self._client.request(self.method, self.url, **request_kwargs)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(self.method, self.url, **request_kwargs)

        return response.text
