# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from tuya_playground.commands import InvalidStatusValue
from tuya_playground.color import DeviceHSV
from tuya_playground.mixins.devices import DevicesMixin
from tuya_playground.mixins.helpers import HelpersMixin
from tuya_playground.mixins.refresh import RefreshMixin
from tuya_playground.mixins.tuya_api import TransportFailure
from tuya_playground.models import Device, Group


class FakeDevices(HelpersMixin, DevicesMixin, RefreshMixin):
    def __init__(self) -> None:
        self.logger = MagicMock()
        self.devices: dict[str, Device] = {}
        self.groups: dict[str, Group] = {}
        self.notifications: list[Any] = []
        self.pending_writes: set[asyncio.Task] = set()
        self.fetch_devices = AsyncMock(return_value=[])
        self.send_commands = AsyncMock(return_value=True)
        self.get_groups = AsyncMock(return_value={})


def remote_device(on: bool = True, brightness: int = 1000, online: bool = True) -> dict[str, Any]:
    return {
        "id": "D1",
        "name": "Desk Lamp",
        "online": online,
        "status": [{"code": "switch_led", "value": on}, {"code": "bright_value_v2", "value": brightness}],
    }


async def loaded(remote: dict[str, Any]) -> FakeDevices:
    fake = FakeDevices()
    fake.fetch_devices.return_value = [remote]
    await fake.get_devices()
    return fake


class TestGetDevices:
    @pytest.mark.asyncio
    async def test_replaces_local_devices(self) -> None:
        fake = FakeDevices()
        fake.devices = {"OLD": Device(id="OLD", name="old")}
        fake.fetch_devices.return_value = [remote_device()]

        devices = await fake.get_devices()

        assert list(devices) == ["D1"]
        assert fake.devices is devices
        assert fake.devices["D1"].name == "Desk Lamp"


class TestToggleDevice:
    @pytest.mark.asyncio
    async def test_commits_before_remote_answers(self) -> None:
        fake = await loaded(remote_device(on=True))
        gate = asyncio.Event()

        async def slow_send(device_id: str, commands: list[dict[str, Any]]) -> bool:
            await gate.wait()
            return True

        fake.send_commands.side_effect = slow_send

        task = fake.toggle_device("D1")
        assert fake.devices["D1"].is_on is False
        assert task in fake.pending_writes

        gate.set()
        await fake.wait_for_writes()
        assert fake.devices["D1"].is_on is False
        assert not fake.pending_writes

    @pytest.mark.asyncio
    async def test_rapid_toggles_compound_off_local_state(self) -> None:
        fake = await loaded(remote_device(on=True))

        fake.toggle_device("D1")
        fake.toggle_device("D1")
        await fake.wait_for_writes()

        sent = [c.args[1][0]["value"] for c in fake.send_commands.call_args_list]
        assert sent == [False, True]
        assert fake.devices["D1"].is_on is True

    @pytest.mark.asyncio
    async def test_failure_refreshes_to_remote_truth(self) -> None:
        fake = await loaded(remote_device(on=True))
        fake.send_commands.side_effect = TransportFailure("http status 500", "D1", "send commands", 500)

        fake.toggle_device("D1")
        assert fake.devices["D1"].is_on is False

        await fake.wait_for_writes()

        # remote still reports on, and refresh put that back
        assert fake.devices["D1"].is_on is True
        assert fake.fetch_devices.await_count == 2
        fake.get_groups.assert_awaited_once()
        assert len(fake.notifications) == 1
        assert "toggle device D1" in fake.notifications[0].message


class TestBrightness:
    @pytest.mark.asyncio
    async def test_offline_device_shows_optimistic_value_then_reverts(self) -> None:
        fake = await loaded(remote_device(brightness=1000, online=False))
        fake.send_commands.side_effect = TransportFailure("tuya reported failure: device is offline", "D1", "send commands", 200)

        fake.set_brightness("D1", 500)
        assert fake.devices["D1"].brightness == 500

        await fake.wait_for_writes()

        assert fake.devices["D1"].brightness == 1000
        assert fake.notifications

    @pytest.mark.asyncio
    async def test_sends_clamped_value(self) -> None:
        fake = await loaded(remote_device())

        fake.set_brightness("D1", 4)
        await fake.wait_for_writes()

        fake.send_commands.assert_awaited_once_with("D1", [{"code": "bright_value_v2", "value": 10}])

    @pytest.mark.asyncio
    async def test_invalid_value_touches_nothing(self) -> None:
        fake = await loaded(remote_device(brightness=800))

        with pytest.raises(InvalidStatusValue):
            fake.set_brightness("D1", "bright")  # type: ignore[arg-type]

        assert fake.devices["D1"].brightness == 800
        assert not fake.pending_writes
        fake.send_commands.assert_not_called()


class TestColor:
    @pytest.mark.asyncio
    async def test_sends_single_v2_command(self) -> None:
        fake = await loaded(remote_device())

        fake.set_color("D1", 240.0, 0.5, 0.75)
        await fake.wait_for_writes()

        fake.send_commands.assert_awaited_once_with("D1", [{"code": "colour_data_v2", "value": {"h": 240, "s": 500, "v": 750}}])
        assert fake.devices["D1"].color == DeviceHSV(240, 500, 750)

    @pytest.mark.asyncio
    async def test_unknown_device_raises(self) -> None:
        fake = await loaded(remote_device())

        with pytest.raises(KeyError):
            fake.set_color("NOPE", 0.0, 0.0, 0.0)
