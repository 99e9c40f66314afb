# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any

from tuya_playground.color import DeviceHSV, MalformedColorEncoding, device_hsv_from_dict, hex_to_device_hsv
from tuya_playground.log import get_logger

logger = get_logger(__name__)

DEFAULT_ON = False
DEFAULT_BRIGHTNESS = 1000
DEFAULT_WORK_MODE = "white"
DEFAULT_COLOR = DeviceHSV(h=0, s=0, v=1000)


def parse_status_value(value: Any, value_type: str | None) -> Any:
    match value_type:
        case "bool":
            return value is True or value == "true"
        case "value":
            try:
                return int(value)
            except (TypeError, ValueError):
                return value
        case _:
            return value


@dataclass
class StatusEntry:
    code: str
    value: Any

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StatusEntry:
        return cls(code=data["code"], value=parse_status_value(data.get("value"), data.get("type")))

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "value": self.value}


class StatusView:
    """Shared lookups over an ordered list of status entries."""

    status: list[StatusEntry]

    def get(self, code: str, default: Any = None) -> Any:
        for entry in self.status:
            if entry.code == code:
                return entry.value
        return default

    def apply(self, entry: StatusEntry) -> None:
        for idx, existing in enumerate(self.status):
            if existing.code == entry.code:
                self.status[idx] = entry
                return
        self.status.append(entry)

    def set_status(self, items: list[dict[str, Any]]) -> None:
        self.status = [StatusEntry.from_dict(item) for item in items]

    def status_map(self) -> dict[str, Any]:
        return {entry.code: entry.value for entry in self.status}


@dataclass
class Device(StatusView):
    id: str
    name: str
    online: bool = False
    status: list[StatusEntry] = field(default_factory=list)
    category: str = ""
    product_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Device:
        return cls(
            id=str(data["id"]),
            name=data.get("name") or str(data["id"]),
            online=bool(data.get("online", False)),
            status=[StatusEntry.from_dict(item) for item in data.get("status") or []],
            category=data.get("category", ""),
            product_name=data.get("product_name", ""),
        )

    @property
    def is_on(self) -> bool:
        return bool(self.get("switch_led", DEFAULT_ON))

    @property
    def brightness(self) -> int:
        return int(self.get("bright_value_v2", DEFAULT_BRIGHTNESS))

    @property
    def color(self) -> DeviceHSV:
        value = self.get("colour_data_v2")
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                value = None
        if not isinstance(value, dict):
            return DEFAULT_COLOR
        try:
            return device_hsv_from_dict(value)
        except (KeyError, TypeError, ValueError):
            logger.warning(f"device {self.id} reported unusable colour_data_v2: {value!r}")
            return DEFAULT_COLOR


@dataclass
class Group(StatusView):
    id: str
    name: str
    device_num: int = 0
    status: list[StatusEntry] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=dict)
    product_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Group:
        return cls(
            id=str(data["group_id"]),
            name=data.get("group_name") or str(data["group_id"]),
            device_num=int(data.get("device_num") or 0),
            status=[StatusEntry.from_dict(item) for item in data.get("status") or []],
            product_name=data.get("product_name", ""),
        )

    @property
    def is_on(self) -> bool:
        return bool(self.get("switch_led", DEFAULT_ON))

    @property
    def brightness(self) -> int:
        return int(self.get("bright_value", DEFAULT_BRIGHTNESS))

    @property
    def work_mode(self) -> str:
        return str(self.get("work_mode", DEFAULT_WORK_MODE))

    @property
    def color(self) -> DeviceHSV:
        # properties carry the richer colour_data_v2 object; status only has the packed hex
        v2 = self.properties.get("colour_data_v2")
        if isinstance(v2, dict):
            try:
                return device_hsv_from_dict(v2)
            except (KeyError, TypeError, ValueError):
                logger.warning(f"group {self.id} has unusable colour_data_v2 property: {v2!r}")

        packed = self.get("colour_data")
        if not packed:
            return DEFAULT_COLOR
        try:
            return hex_to_device_hsv(packed)
        except MalformedColorEncoding as err:
            logger.warning(f"group {self.id} reported bad colour_data: {err}")
            return DEFAULT_COLOR
