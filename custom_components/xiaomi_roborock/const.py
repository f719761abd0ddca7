"""Constants for the Xiaomi Roborock integration."""

from __future__ import annotations

DOMAIN = "xiaomi_roborock"
MANUFACTURER = "Xiaomi"

CONF_ROOM_NAMES = "room_names"
CONF_SILENT = "silent"

DATA_MANAGER = "manager"
DATA_BRIDGE = "bridge"
DATA_COORDINATOR = "coordinator"

DEFAULT_NAME = "Roborock vacuum cleaner"
READY_TIMEOUT = 30
PROBE_TIMEOUT = 10
