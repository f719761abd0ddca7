"""Diagnostics support for Xiaomi Roborock."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields, is_dataclass
import enum
from typing import Any

from rvc_bridge import VacuumBridge, redact_for_diagnostics

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_TOKEN
from homeassistant.core import HomeAssistant

from .const import DATA_BRIDGE, DATA_COORDINATOR, DOMAIN
from .coordinator import RoborockDataUpdateCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    data = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    bridge: VacuumBridge | None = data.get(DATA_BRIDGE) if data else None
    coordinator: RoborockDataUpdateCoordinator | None = (
        data.get(DATA_COORDINATOR) if data else None
    )
    manager = bridge.manager if bridge is not None else None
    snapshot = coordinator.data if coordinator is not None else None

    return {
        "entry_id": entry.entry_id,
        "host_configured": CONF_HOST in entry.data,
        "token_present": bool(entry.data.get(CONF_TOKEN)),
        "options": _to_jsonable(entry.options),
        "connection_state": manager.state.value if manager is not None else None,
        "model": manager.model if manager is not None else None,
        "firmware": bridge.firmware if bridge is not None else None,
        "identity": redact_for_diagnostics(
            _to_jsonable(manager.identity if manager is not None else None)
        ),
        "clean_modes": _to_jsonable(bridge.clean_modes if bridge is not None else ()),
        "service_areas": _to_jsonable(
            bridge.service_areas if bridge is not None else ()
        ),
        "properties": redact_for_diagnostics(
            _to_jsonable(manager.properties if manager is not None else {})
        ),
        "snapshot": _to_jsonable(snapshot),
    }


def _to_jsonable(value: Any) -> Any:
    """Normalize library objects to JSON-safe types."""
    if value is None:
        return None
    if is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: _to_jsonable(getattr(value, field.name))
            for field in fields(value)
        }
    if isinstance(value, Mapping):
        return {str(key): _to_jsonable(val) for key, val in value.items()}
    if isinstance(value, list | tuple):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, set | frozenset):
        return sorted([_to_jsonable(item) for item in value], key=str)
    if isinstance(value, enum.IntEnum):
        return int(value)
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
