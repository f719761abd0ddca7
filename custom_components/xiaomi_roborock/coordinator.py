"""Data update coordinator for the Xiaomi Roborock integration."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from rvc_bridge import VacuumBridge

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .const import DOMAIN

_LOGGER = logging.getLogger(__name__)

type EndpointSnapshot = dict[str, dict[str, Any]]


class RoborockDataUpdateCoordinator(DataUpdateCoordinator[EndpointSnapshot]):
    """Push endpoint attribute changes to entities.

    The device is polled by the library; this coordinator never polls. Bursts
    of attribute updates within one loop iteration produce one refresh.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        bridge: VacuumBridge,
        entry: ConfigEntry,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(hass, _LOGGER, name=DOMAIN, config_entry=entry)
        self._bridge = bridge
        self._unsubscribe: Callable[[], None] | None = None
        self._publish_scheduled = False

    @property
    def bridge(self) -> VacuumBridge:
        return self._bridge

    async def async_start(self) -> None:
        """Subscribe to endpoint changes and seed the snapshot."""
        endpoint = self._bridge.endpoint
        if endpoint is None:
            return
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = endpoint.add_listener(self._handle_attribute)
        self.async_set_updated_data(endpoint.snapshot())

    async def async_stop(self) -> None:
        """Stop listening for endpoint changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _async_update_data(self) -> EndpointSnapshot:
        endpoint = self._bridge.endpoint
        return endpoint.snapshot() if endpoint is not None else {}

    def _handle_attribute(self, cluster_id: int, attribute: str, value: Any) -> None:
        _LOGGER.debug("Attribute %s/%s changed to %s", hex(cluster_id), attribute, value)
        if self._publish_scheduled:
            return
        self._publish_scheduled = True
        self.hass.loop.call_soon_threadsafe(self._publish)

    @callback
    def _publish(self) -> None:
        self._publish_scheduled = False
        endpoint = self._bridge.endpoint
        if endpoint is None or self._unsubscribe is None:
            return
        self.async_set_updated_data(endpoint.snapshot())
