# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
from __future__ import annotations

from .mixins.helpers import HelpersMixin
from .mixins.tuya_api import TuyaAPIMixin
from .mixins.devices import DevicesMixin
from .mixins.groups import GroupsMixin
from .mixins.refresh import RefreshMixin
from .mixins.playground import PlaygroundMixin
from .mixins.loops import LoopsMixin
from .base import Base


class TuyaPlayground(
    HelpersMixin,
    TuyaAPIMixin,
    DevicesMixin,
    GroupsMixin,
    RefreshMixin,
    PlaygroundMixin,
    LoopsMixin,
    Base,
):
    pass
