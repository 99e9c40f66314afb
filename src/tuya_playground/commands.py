# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
"""Build Tuya device commands and group properties from control intents.

Devices take a list of ``{"code", "value"}`` commands; groups take a flat
property map. Every value is checked against the type descriptor for its
code before anything is sent.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any

from tuya_playground.color import HUE_MAX, SV_MAX, DeviceHSV, device_hsv_to_hex
from tuya_playground.models import StatusEntry


class InvalidStatusValue(ValueError):
    """Raised when a value does not satisfy the type descriptor of its code."""

    pass


@dataclass(frozen=True)
class TypeDescriptor:
    type: str
    min: int | None = None
    max: int | None = None
    step: int = 1
    scale: int = 0
    unit: str = ""
    range: tuple[str, ...] = field(default_factory=tuple)
    maxlen: int | None = None

    @classmethod
    def from_type_desc(cls, type_desc: str | dict[str, Any]) -> TypeDescriptor:
        data = json.loads(type_desc) if isinstance(type_desc, str) else type_desc
        return cls(
            type=data["type"],
            min=data.get("min"),
            max=data.get("max"),
            step=data.get("step") or 1,
            scale=data.get("scale", 0),
            unit=data.get("unit", ""),
            range=tuple(data.get("range", ())),
            maxlen=data.get("maxlen"),
        )

    def validate(self, code: str, value: Any) -> None:
        match self.type:
            case "bool":
                if not isinstance(value, bool):
                    raise InvalidStatusValue(f"{code} expects a bool, got {value!r}")
            case "value":
                if not isinstance(value, int) or isinstance(value, bool):
                    raise InvalidStatusValue(f"{code} expects an integer, got {value!r}")
                if self.min is not None and value < self.min or self.max is not None and value > self.max:
                    raise InvalidStatusValue(f"{code}={value} outside {self.min}..{self.max}")
                if (value - (self.min or 0)) % self.step:
                    raise InvalidStatusValue(f"{code}={value} is not on step {self.step}")
            case "enum":
                if value not in self.range:
                    raise InvalidStatusValue(f"{code}={value!r} not one of {list(self.range)}")
            case "string" | "raw":
                if not isinstance(value, str):
                    raise InvalidStatusValue(f"{code} expects a string, got {value!r}")
                if self.maxlen is not None and len(value) > self.maxlen:
                    raise InvalidStatusValue(f"{code} longer than {self.maxlen} characters")
            case "json":
                _validate_hsv_object(code, value)
            case _:
                raise InvalidStatusValue(f"{code} has unsupported type {self.type!r}")


def _validate_hsv_object(code: str, value: Any) -> None:
    if not isinstance(value, dict) or set(value) != {"h", "s", "v"}:
        raise InvalidStatusValue(f"{code} expects an object with h, s, v, got {value!r}")
    for key, high in (("h", HUE_MAX), ("s", SV_MAX), ("v", SV_MAX)):
        part = value[key]
        if not isinstance(part, int) or isinstance(part, bool) or not 0 <= part <= high:
            raise InvalidStatusValue(f"{code}.{key}={part!r} outside 0..{high}")


# Type descriptors --------------------------------------------------------------------------------

# group schema as reported by the cloud for our light groups
KNOWN_GROUP_PROPERTIES: list[dict[str, str]] = [
    {"code": "control_data", "name": "Adjust", "type": "string", "type_desc": '{"maxlen":255,"type":"string","typeDefaultValue":""}'},
    {
        "code": "countdown",
        "name": "Timer",
        "type": "value",
        "type_desc": '{"max":86400,"min":0,"scale":0,"step":1,"type":"value","typeDefaultValue":0,"unit":"s"}',
    },
    {
        "code": "work_mode",
        "name": "Mode",
        "type": "enum",
        "type_desc": '{"range":["white","colour","scene","music"],"type":"enum","typeDefaultValue":"white"}',
    },
    {"code": "rhythm_mode", "name": "Rhythms", "type": "raw", "type_desc": '{"maxlen":255,"type":"raw"}'},
    {
        "code": "temp_value",
        "name": "Color Temp",
        "type": "value",
        "type_desc": '{"max":1000,"min":0,"scale":0,"step":1,"type":"value","typeDefaultValue":0}',
    },
    {"code": "power_memory", "name": "Power Off Memory", "type": "raw", "type_desc": '{"maxlen":255,"type":"raw"}'},
    {"code": "music_data", "name": "Music", "type": "string", "type_desc": '{"maxlen":255,"type":"string","typeDefaultValue":""}'},
    {"code": "scene_data", "name": "Scene", "type": "string", "type_desc": '{"maxlen":255,"type":"string","typeDefaultValue":""}'},
    {
        "code": "bright_value",
        "name": "Brightness",
        "type": "value",
        "type_desc": '{"max":1000,"min":10,"scale":0,"step":1,"type":"value","typeDefaultValue":10}',
    },
    {"code": "colour_data", "name": "Colorful", "type": "string", "type_desc": '{"maxlen":255,"type":"string","typeDefaultValue":""}'},
    {"code": "switch_led", "name": "ON/OFF", "type": "bool", "type_desc": '{"type":"bool","typeDefaultValue":false}'},
]

GROUP_DESCRIPTORS: dict[str, TypeDescriptor] = {
    prop["code"]: TypeDescriptor.from_type_desc(prop["type_desc"]) for prop in KNOWN_GROUP_PROPERTIES
}

DEVICE_DESCRIPTORS: dict[str, TypeDescriptor] = {
    "switch_led": TypeDescriptor(type="bool"),
    "bright_value_v2": TypeDescriptor(type="value", min=10, max=1000, step=1),
    "colour_data_v2": TypeDescriptor(type="json"),
}


def validate(code: str, value: Any, descriptors: dict[str, TypeDescriptor]) -> None:
    descriptor = descriptors.get(code)
    if descriptor is None:
        raise InvalidStatusValue(f"unknown status code {code!r}")
    descriptor.validate(code, value)


def validate_commands(commands: list[dict[str, Any]], descriptors: dict[str, TypeDescriptor] = DEVICE_DESCRIPTORS) -> None:
    for command in commands:
        validate(command["code"], command["value"], descriptors)


def validate_properties(properties: dict[str, Any], descriptors: dict[str, TypeDescriptor] = GROUP_DESCRIPTORS) -> None:
    for code, value in properties.items():
        validate(code, value, descriptors)


def clamp_value(value: Any, descriptor: TypeDescriptor) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidStatusValue(f"expected a number, got {value!r}")
    low = descriptor.min if descriptor.min is not None else value
    high = descriptor.max if descriptor.max is not None else value
    clamped = max(low, min(high, value))
    base = descriptor.min or 0
    steps = round((clamped - base) / descriptor.step)
    return int(min(high, base + steps * descriptor.step))


# Intents -----------------------------------------------------------------------------------------


def toggle_device(current_on: bool) -> list[dict[str, Any]]:
    return [{"code": "switch_led", "value": not current_on}]


def toggle_group(current_on: bool) -> dict[str, Any]:
    return {"switch_led": not current_on}


def device_brightness(value: int | float) -> list[dict[str, Any]]:
    return [{"code": "bright_value_v2", "value": clamp_value(value, DEVICE_DESCRIPTORS["bright_value_v2"])}]


def group_brightness(value: int | float) -> dict[str, Any]:
    return {"bright_value": clamp_value(value, GROUP_DESCRIPTORS["bright_value"])}


def device_color(hsv: DeviceHSV) -> list[dict[str, Any]]:
    # colour_data_v2 implies colour mode on the device, no work_mode needed
    return [{"code": "colour_data_v2", "value": hsv.as_dict()}]


def group_color(hsv: DeviceHSV) -> dict[str, Any]:
    # groups have no combined colour code, so setting a color always forces colour mode
    return {"work_mode": "colour", "colour_data": device_hsv_to_hex(hsv)}


# Optimistic status -------------------------------------------------------------------------------


def commands_to_status(commands: list[dict[str, Any]]) -> list[StatusEntry]:
    return [StatusEntry(code=command["code"], value=command["value"]) for command in commands]


def properties_to_status(properties: dict[str, Any]) -> list[StatusEntry]:
    return [StatusEntry(code=code, value=value) for code, value in properties.items()]
