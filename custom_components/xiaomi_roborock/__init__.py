"""Set up the Xiaomi Roborock integration."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_VENDOR_PATH = Path(__file__).resolve().parent / "vendor" / "rvcbridge"
if _VENDOR_PATH.exists() and str(_VENDOR_PATH) not in sys.path:
    sys.path.insert(0, str(_VENDOR_PATH))

from rvc_bridge import (
    ConfigError,
    DeviceConfig,
    DeviceManager,
    DeviceStoppedError,
    UnsupportedDeviceError,
    VacuumBridge,
)

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_NAME, CONF_TOKEN, Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryError, ConfigEntryNotReady

from .const import (
    CONF_ROOM_NAMES,
    CONF_SILENT,
    DATA_BRIDGE,
    DATA_COORDINATOR,
    DATA_MANAGER,
    DEFAULT_NAME,
    DOMAIN,
    READY_TIMEOUT,
)
from .coordinator import RoborockDataUpdateCoordinator

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.SENSOR,
    Platform.VACUUM,
]


def device_config_from_entry(entry: ConfigEntry) -> DeviceConfig:
    """Build the library configuration from a config entry."""
    options = {**entry.data, **entry.options}
    return DeviceConfig.from_mapping(
        {
            "name": options.get(CONF_NAME) or entry.title or DEFAULT_NAME,
            "address": options.get(CONF_HOST),
            "token": options.get(CONF_TOKEN),
            "room_names": options.get(CONF_ROOM_NAMES) or (),
            "silent": options.get(CONF_SILENT, False),
        }
    )


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up a Xiaomi Roborock vacuum from a config entry."""
    config = device_config_from_entry(entry)
    try:
        manager = DeviceManager(config)
    except ConfigError as err:
        raise ConfigEntryError(str(err)) from err

    manager.start()
    bridge = VacuumBridge(manager, config)
    try:
        await bridge.async_initialize(timeout=READY_TIMEOUT)
    except (TimeoutError, DeviceStoppedError) as err:
        last_error = manager.last_error
        bridge.stop()
        if isinstance(last_error, (UnsupportedDeviceError, ConfigError)):
            raise ConfigEntryError(str(last_error)) from last_error
        _LOGGER.debug("Vacuum at %s is not ready: %s", config.address, last_error)
        raise ConfigEntryNotReady(
            f"The vacuum at {config.address} did not connect before timeout"
        ) from err

    coordinator = RoborockDataUpdateCoordinator(hass, bridge, entry)
    await coordinator.async_start()
    bridge.post_register()
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        DATA_MANAGER: manager,
        DATA_BRIDGE: bridge,
        DATA_COORDINATOR: coordinator,
    }
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry when its options change."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a Xiaomi Roborock config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if data is not None:
        coordinator: RoborockDataUpdateCoordinator | None = data.get(DATA_COORDINATOR)
        bridge: VacuumBridge | None = data.get(DATA_BRIDGE)
        if coordinator is not None:
            await coordinator.async_stop()
        if bridge is not None:
            bridge.stop()
    return unload_ok
