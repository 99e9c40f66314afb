# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from typing import Any

import pytest


@pytest.fixture
def sample_tuya_config() -> dict[str, Any]:
    """Return a minimal valid config dict for tuya-playground."""
    return {
        "tuya": {
            "base_url": "http://proxy.test:3000",
            "space_id": "227120177",
            "page_size": 18,
            "refresh_interval": 30.0,
            "group_poll_interval": 5.0,
            "timeout": 15.0,
        },
        "playground": {
            "width": 120,
            "height": 80,
            "mode": "static",
            "image": None,
            "fill": [255, 0, 0],
            "sample_interval": 1.0,
            "fps": 30.0,
            "speed": 0.5,
            "stops": 12,
            "smoothness": 0.5,
            "listen": [],
        },
        "debug": False,
        "hide_ts": False,
        "config_from": "test",
        "config_path": "/tmp",
        "version": "0.0.0-test",
    }


@pytest.fixture
def group_payload() -> dict[str, Any]:
    """A group as listed by the proxy's /groups endpoint."""
    return {"group_id": "G100", "group_name": "Living Room", "device_num": 3, "status": []}


@pytest.fixture
def group_status_payload() -> list[dict[str, Any]]:
    """Stringly-typed group status as returned by /groups/{id}/status."""
    return [
        {"code": "switch_led", "value": "true", "type": "bool"},
        {"code": "bright_value", "value": "640", "type": "value"},
        {"code": "work_mode", "value": "white", "type": "enum"},
        {"code": "colour_data", "value": "007803e803e8", "type": "string"},
    ]


@pytest.fixture
def device_payload() -> dict[str, Any]:
    """A device as listed by the proxy's /devices endpoint."""
    return {
        "id": "D200",
        "name": "Desk Lamp",
        "online": True,
        "category": "dj",
        "product_name": "Smart Bulb",
        "status": [
            {"code": "switch_led", "value": True},
            {"code": "bright_value_v2", "value": 800},
            {"code": "colour_data_v2", "value": '{"h":240,"s":1000,"v":500}'},
        ],
    }
