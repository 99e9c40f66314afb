# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
import asyncio
import json
from datetime import datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from tuya_playground.mixins.tuya_api import TransportFailure, TuyaAPIMixin


def make_response(status: int = 200, payload: Any = None, json_error: Exception | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status = status
    resp.json = AsyncMock(return_value=payload, side_effect=json_error)

    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=resp)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx


def failing_request(error: BaseException) -> MagicMock:
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(side_effect=error)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx


def ok(result: Any) -> dict[str, Any]:
    return {"result": result, "success": True, "t": 1700000000000, "tid": "abc"}


class FakeClient(TuyaAPIMixin):
    def __init__(self) -> None:
        self.logger = MagicMock()
        self.base_url = "http://proxy.test:3000/"
        self.space_id = "227120177"
        self.page_size = 18
        self.session = MagicMock()
        self.session.get = MagicMock(return_value=make_response(payload=ok({"devices": []})))
        self.session.post = MagicMock(return_value=make_response(payload=ok(True)))
        self.rate_limited = False
        self.api_calls = 0
        self.last_call_date: datetime | None = None


class TestFetchDevices:
    @pytest.mark.asyncio
    async def test_returns_device_list(self) -> None:
        client = FakeClient()
        client.session.get.return_value = make_response(payload=ok({"devices": [{"id": "D1"}]}))

        devices = await client.fetch_devices()

        assert devices == [{"id": "D1"}]
        assert client.session.get.call_args.args[0] == "http://proxy.test:3000/devices"
        assert client.api_calls == 1

    @pytest.mark.asyncio
    async def test_missing_list_raises(self) -> None:
        client = FakeClient()
        client.session.get.return_value = make_response(payload=ok({}))

        with pytest.raises(TransportFailure) as info:
            await client.fetch_devices()
        assert info.value.operation == "fetch devices"


class TestFailures:
    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status_and_payload(self) -> None:
        client = FakeClient()
        body = {"error": "Failed to send command", "details": "boom"}
        client.session.post.return_value = make_response(status=500, payload=body)

        with pytest.raises(TransportFailure) as info:
            await client.send_commands("D1", [{"code": "switch_led", "value": True}])

        assert info.value.status == 500
        assert info.value.payload == body
        assert info.value.target_id == "D1"
        assert info.value.operation == "send commands"
        client.logger.error.assert_called_once()
        logged = client.logger.error.call_args.args[0]
        assert "send commands (D1) failed: http status 500" in logged
        assert "Failed to send command" in logged

    @pytest.mark.asyncio
    async def test_vendor_failure_envelope_raises(self) -> None:
        client = FakeClient()
        client.session.post.return_value = make_response(payload={"success": False, "msg": "device is offline", "code": 2001})

        with pytest.raises(TransportFailure) as info:
            await client.send_properties("G1", {"switch_led": True})

        assert info.value.status == 200
        assert "device is offline" in str(info.value)

    @pytest.mark.asyncio
    async def test_client_error_raises_transport_failure(self) -> None:
        client = FakeClient()
        error = aiohttp.ClientConnectionError("connection refused")
        client.session.get.return_value = failing_request(error)

        with pytest.raises(TransportFailure) as info:
            await client.fetch_group_status("G1")

        assert info.value.status is None
        assert info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_failure(self) -> None:
        client = FakeClient()
        client.session.get.return_value = failing_request(asyncio.TimeoutError())

        with pytest.raises(TransportFailure, match="timed out"):
            await client.fetch_devices()

    @pytest.mark.asyncio
    async def test_undecodable_body_raises(self) -> None:
        client = FakeClient()
        client.session.get.return_value = make_response(json_error=json.JSONDecodeError("bad", "<html>", 0))

        with pytest.raises(TransportFailure, match="not a json object"):
            await client.fetch_devices()

    @pytest.mark.asyncio
    async def test_rate_limit_is_flagged(self) -> None:
        client = FakeClient()
        client.session.get.return_value = make_response(status=429, payload={"error": "slow down"})

        with pytest.raises(TransportFailure):
            await client.fetch_devices()

        assert client.rate_limited is True
        client.logger.warning.assert_called_once()


class TestGroups:
    @pytest.mark.asyncio
    async def test_page_query_and_metadata(self) -> None:
        client = FakeClient()
        client.session.get.return_value = make_response(
            payload=ok({"list": [{"group_id": "G1"}], "total": 1, "page_size": 18, "page_number": 1})
        )

        page = await client.fetch_groups_page(1, 18)

        assert page == {"list": [{"group_id": "G1"}], "total": 1, "page_no": 1, "page_size": 18}
        assert client.session.get.call_args.kwargs["params"] == {"page_no": 1, "page_size": 18, "space_id": "227120177"}

    @pytest.mark.asyncio
    async def test_fetch_groups_pages_until_total(self) -> None:
        client = FakeClient()
        client.page_size = 2
        client.session.get.side_effect = [
            make_response(payload=ok({"list": [{"group_id": "G1"}, {"group_id": "G2"}], "total": 3, "page_size": 2, "page_number": 1})),
            make_response(payload=ok({"list": [{"group_id": "G3"}], "total": 3, "page_size": 2, "page_number": 2})),
        ]

        groups = await client.fetch_groups()

        assert [g["group_id"] for g in groups] == ["G1", "G2", "G3"]
        assert client.session.get.call_count == 2
        assert client.session.get.call_args.kwargs["params"]["page_no"] == 2

    @pytest.mark.asyncio
    async def test_group_status(self) -> None:
        client = FakeClient()
        status = [{"code": "switch_led", "value": "true", "type": "bool"}]
        client.session.get.return_value = make_response(payload=ok(status))

        assert await client.fetch_group_status("G1") == status
        assert client.session.get.call_args.args[0] == "http://proxy.test:3000/groups/G1/status"

    @pytest.mark.asyncio
    async def test_group_properties_json_string_is_decoded(self) -> None:
        client = FakeClient()
        props = {"colour_data_v2": {"h": 1, "s": 2, "v": 3}, "switch_led": True}
        client.session.get.return_value = make_response(payload=ok({"properties": json.dumps(props)}))

        assert await client.fetch_group_properties("G1") == props

    @pytest.mark.asyncio
    async def test_send_properties_posts_json_string(self) -> None:
        client = FakeClient()
        props = {"work_mode": "colour", "colour_data": "007803e803e8"}

        await client.send_properties("G1", props)

        args, kwargs = client.session.post.call_args
        assert args[0] == "http://proxy.test:3000/groups/G1/properties"
        assert kwargs["json"] == {"properties": json.dumps(props)}
        assert json.loads(kwargs["json"]["properties"]) == props

    @pytest.mark.asyncio
    async def test_send_commands_body(self) -> None:
        client = FakeClient()
        commands = [{"code": "bright_value_v2", "value": 500}]

        await client.send_commands("D1", commands)

        args, kwargs = client.session.post.call_args
        assert args[0] == "http://proxy.test:3000/devices/D1/commands"
        assert kwargs["json"] == {"commands": commands}


class TestApiCalls:
    def test_counter_resets_on_new_day(self) -> None:
        client = FakeClient()
        client.api_calls = 41
        client.last_call_date = datetime.now() - timedelta(days=1)

        client.increase_api_calls()

        assert client.api_calls == 1

    def test_counter_accumulates_same_day(self) -> None:
        client = FakeClient()
        client.api_calls = 41
        client.last_call_date = datetime.now()

        client.increase_api_calls()

        assert client.api_calls == 42

    def test_restore_state_values(self) -> None:
        client = FakeClient()
        client.restore_state_values(7, "2026-01-15T10:30:00")
        assert client.api_calls == 7
        assert client.last_call_date == datetime(2026, 1, 15, 10, 30)
