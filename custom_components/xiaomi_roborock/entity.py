"""Shared entity helpers for the Xiaomi Roborock integration."""

from __future__ import annotations

from typing import Any

from rvc_bridge import VacuumBridge
from rvc_bridge.endpoint import EndpointInfo

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST
from homeassistant.helpers.device_registry import (
    CONNECTION_NETWORK_MAC,
    DeviceInfo,
    format_mac,
)
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN, MANUFACTURER
from .coordinator import RoborockDataUpdateCoordinator


def _endpoint_info(bridge: VacuumBridge) -> EndpointInfo | None:
    endpoint = bridge.endpoint
    return endpoint.info if endpoint is not None else None


def _device_mac(bridge: VacuumBridge) -> str | None:
    identity = bridge.manager.identity
    return identity.mac if identity is not None else None


def unique_base(bridge: VacuumBridge, entry: ConfigEntry) -> str:
    """Return the stable unique ID base for this config entry."""
    info = _endpoint_info(bridge)
    if info is not None and info.serial_number and info.serial_number != "unknown":
        return info.serial_number
    if entry.unique_id:
        return entry.unique_id
    return entry.data[CONF_HOST]


def build_unique_id(base: str, domain: str, key: str) -> str:
    """Build a stable unique ID in <serial>:<domain>:<key> format."""
    return f"{base}:{domain}:{key}"


def device_info_for_entry(bridge: VacuumBridge, entry: ConfigEntry) -> DeviceInfo:
    """Build device info for entities tied to a config entry."""
    info = _endpoint_info(bridge)
    mac = _device_mac(bridge)
    return DeviceInfo(
        connections={(CONNECTION_NETWORK_MAC, format_mac(mac))} if mac else set(),
        identifiers={(DOMAIN, unique_base(bridge, entry))},
        manufacturer=info.vendor_name if info is not None else MANUFACTURER,
        name=info.name if info is not None else entry.title,
        model=info.product_name if info is not None else None,
        sw_version=info.software_version if info is not None else None,
        hw_version=info.hardware_version if info is not None else None,
        serial_number=info.serial_number if info is not None else None,
    )


class RoborockEntity(CoordinatorEntity[RoborockDataUpdateCoordinator]):
    """Base entity reading attributes from the coordinator snapshot."""

    _attr_has_entity_name = True

    def __init__(
        self,
        coordinator: RoborockDataUpdateCoordinator,
        entry: ConfigEntry,
        domain: str,
        key: str,
    ) -> None:
        super().__init__(coordinator)
        self._bridge = coordinator.bridge
        self._entry = entry
        self._attr_unique_id = build_unique_id(
            unique_base(self._bridge, entry), domain, key
        )
        self._attr_device_info = device_info_for_entry(self._bridge, entry)

    def cluster_value(self, cluster: str, attribute: str) -> Any:
        """Return an attribute from the latest endpoint snapshot."""
        data = self.coordinator.data or {}
        return data.get(cluster, {}).get(attribute)
