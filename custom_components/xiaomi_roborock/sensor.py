"""Sensors for the Xiaomi Roborock integration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from rvc_bridge import ErrorState

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE, EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddConfigEntryEntitiesCallback

from .const import DATA_COORDINATOR, DOMAIN
from .coordinator import EndpointSnapshot, RoborockDataUpdateCoordinator
from .entity import RoborockEntity


def _attribute(data: EndpointSnapshot, cluster: str, attribute: str) -> Any:
    return (data or {}).get(cluster, {}).get(attribute)


def _battery(data: EndpointSnapshot, _bridge: Any) -> int | None:
    # batPercentRemaining is reported in half-percent steps.
    value = _attribute(data, "powerSource", "batPercentRemaining")
    return value // 2 if value is not None else None


def _operational_error(data: EndpointSnapshot, _bridge: Any) -> str | None:
    error = _attribute(data, "rvcOperationalState", "operationalError") or {}
    state_id = error.get("errorStateId")
    if state_id is None:
        return None
    try:
        return ErrorState(state_id).name.lower()
    except ValueError:
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class RoborockSensorDescription(SensorEntityDescription):
    """Describe a Roborock sensor."""

    value_fn: Callable[[EndpointSnapshot, Any], Any]


SENSORS: tuple[RoborockSensorDescription, ...] = (
    RoborockSensorDescription(
        key="battery",
        device_class=SensorDeviceClass.BATTERY,
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=PERCENTAGE,
        value_fn=_battery,
    ),
    RoborockSensorDescription(
        key="operational_error",
        translation_key="operational_error",
        device_class=SensorDeviceClass.ENUM,
        options=[state.name.lower() for state in ErrorState],
        entity_category=EntityCategory.DIAGNOSTIC,
        value_fn=_operational_error,
    ),
    RoborockSensorDescription(
        key="connection",
        translation_key="connection",
        device_class=SensorDeviceClass.ENUM,
        options=["disconnected", "connecting", "connected", "stopped"],
        entity_category=EntityCategory.DIAGNOSTIC,
        value_fn=lambda data, bridge: bridge.manager.state.value,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddConfigEntryEntitiesCallback,
) -> None:
    """Set up Roborock sensors from a config entry."""
    coordinator: RoborockDataUpdateCoordinator = hass.data[DOMAIN][entry.entry_id][
        DATA_COORDINATOR
    ]
    async_add_entities(
        RoborockSensor(coordinator, entry, description) for description in SENSORS
    )


class RoborockSensor(RoborockEntity, SensorEntity):
    """Representation of a Roborock sensor."""

    entity_description: RoborockSensorDescription

    def __init__(
        self,
        coordinator: RoborockDataUpdateCoordinator,
        entry: ConfigEntry,
        description: RoborockSensorDescription,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, entry, "sensor", description.key)
        self.entity_description = description

    @property
    def native_value(self) -> Any:
        """Return the current value."""
        return self.entity_description.value_fn(self.coordinator.data, self._bridge)
