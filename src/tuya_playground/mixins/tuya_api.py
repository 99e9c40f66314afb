# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

import asyncio
from aiohttp import ClientError
from datetime import datetime
import json

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tuya_playground.interface import TuyaServiceProtocol as TuyaPlayground


class TransportFailure(Exception):
    """Raised when a call to the Tuya proxy does not produce a usable answer."""

    def __init__(self, message: str, target_id: str | None, operation: str, status: int | None = None, payload: Any = None) -> None:
        super().__init__(message)
        self.target_id = target_id
        self.operation = operation
        self.status = status
        self.payload = payload


class TuyaAPIMixin:
    def restore_state_values(self: TuyaPlayground, api_calls: int, last_call_date: str | None) -> None:
        self.api_calls = api_calls
        self.last_call_date = datetime.fromisoformat(last_call_date) if last_call_date else None

    def increase_api_calls(self: TuyaPlayground) -> None:
        if not self.last_call_date or self.last_call_date.date() != datetime.now().date():
            self.api_calls = 0
        self.last_call_date = datetime.now()
        self.api_calls += 1

    def set_if_rate_limited(self: TuyaPlayground, status: int) -> None:
        self.rate_limited = status == 429
        if self.rate_limited:
            self.logger.warning("request rate-limited by Tuya")

    def get_url(self: TuyaPlayground, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _failure(
        self: TuyaPlayground, message: str, target_id: str | None, operation: str, status: int | None = None, payload: Any = None
    ) -> TransportFailure:
        target = f" ({target_id})" if target_id else ""
        detail = f", payload: {payload!r}" if payload is not None else ""
        self.logger.error(f"{operation}{target} failed: {message}{detail}")
        return TransportFailure(message, target_id, operation, status, payload)

    async def _request(
        self: TuyaPlayground,
        method: str,
        path: str,
        operation: str,
        target_id: str | None = None,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Single request to the proxy. Returns the envelope's ``result`` or raises TransportFailure."""
        url = self.get_url(path)
        request = self.session.get(url, params=params) if method == "GET" else self.session.post(url, json=body)

        try:
            async with request as r:
                self.increase_api_calls()
                self.set_if_rate_limited(r.status)

                try:
                    data = await r.json(content_type=None)
                except ValueError:
                    data = None

                if not 200 <= r.status < 300:
                    raise self._failure(f"http status {r.status}", target_id, operation, r.status, data)

        except ClientError as err:
            raise self._failure(f"request error: {err}", target_id, operation) from err
        except asyncio.TimeoutError as err:
            raise self._failure("request timed out", target_id, operation) from err

        if not isinstance(data, dict):
            raise self._failure("response body is not a json object", target_id, operation, r.status, data)
        if data.get("success") is False:
            msg = data.get("msg") or data.get("error") or "unknown error"
            raise self._failure(f"tuya reported failure: {msg}", target_id, operation, r.status, data)

        return data.get("result")

    # Devices -------------------------------------------------------------------------------------

    async def fetch_devices(self: TuyaPlayground) -> list[dict[str, Any]]:
        result = await self._request("GET", "devices", "fetch devices")
        devices = result.get("devices") if isinstance(result, dict) else None
        if not isinstance(devices, list):
            raise self._failure("response has no device list", None, "fetch devices", payload=result)
        return devices

    async def fetch_device_status(self: TuyaPlayground, device_id: str) -> list[dict[str, Any]]:
        result = await self._request("GET", f"devices/{device_id}/status", "fetch device status", device_id)
        return result if isinstance(result, list) else []

    async def send_commands(self: TuyaPlayground, device_id: str, commands: list[dict[str, Any]]) -> Any:
        self.logger.debug(f"sending {commands} to device {device_id}")
        return await self._request("POST", f"devices/{device_id}/commands", "send commands", device_id, body={"commands": commands})

    # Groups --------------------------------------------------------------------------------------

    async def fetch_groups_page(self: TuyaPlayground, page_no: int = 1, page_size: int | None = None) -> dict[str, Any]:
        params = {"page_no": page_no, "page_size": page_size or self.page_size, "space_id": self.space_id}
        result = await self._request("GET", "groups", "fetch groups", params=params)
        if not isinstance(result, dict):
            raise self._failure("response has no group page", None, "fetch groups", payload=result)

        groups = result.get("list") or []
        return {
            "list": groups,
            "total": int(result.get("total") or 0),
            "page_no": int(result.get("page_number") or result.get("page_no") or page_no),
            "page_size": int(result.get("page_size") or params["page_size"]),
        }

    async def fetch_groups(self: TuyaPlayground) -> list[dict[str, Any]]:
        groups: list[dict[str, Any]] = []
        page_no = 1
        while True:
            page = await self.fetch_groups_page(page_no, self.page_size)
            groups.extend(page["list"])
            if not page["list"] or len(page["list"]) < page["page_size"] or len(groups) >= page["total"]:
                break
            page_no += 1
        return groups

    async def fetch_group_status(self: TuyaPlayground, group_id: str) -> list[dict[str, Any]]:
        result = await self._request("GET", f"groups/{group_id}/status", "fetch group status", group_id)
        if isinstance(result, dict):
            result = result.get("status") or result.get("list")
        return result if isinstance(result, list) else []

    async def fetch_group_properties(self: TuyaPlayground, group_id: str) -> dict[str, Any]:
        result = await self._request("GET", f"groups/{group_id}/properties", "fetch group properties", group_id)
        if isinstance(result, dict) and isinstance(result.get("properties"), str):
            result = result["properties"]
        if isinstance(result, str):
            try:
                result = json.loads(result)
            except ValueError as err:
                raise self._failure(f"undecodable properties: {err}", group_id, "fetch group properties", payload=result) from err
        return result if isinstance(result, dict) else {}

    async def send_properties(self: TuyaPlayground, group_id: str, properties: dict[str, Any]) -> Any:
        self.logger.debug(f"sending {properties} to group {group_id}")
        body = {"properties": json.dumps(properties)}
        return await self._request("POST", f"groups/{group_id}/properties", "send properties", group_id, body=body)
