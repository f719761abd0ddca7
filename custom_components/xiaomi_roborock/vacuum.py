"""Vacuum platform for the Xiaomi Roborock integration."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from rvc_bridge import Command, OperationalState, RvcBridgeError
from rvc_bridge.clusters import RUN_MODE_CLEANING, SelectAreasStatus

from homeassistant.components.vacuum import (
    StateVacuumEntity,
    VacuumActivity,
    VacuumEntityFeature,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddConfigEntryEntitiesCallback

from .const import DATA_COORDINATOR, DOMAIN
from .coordinator import RoborockDataUpdateCoordinator
from .entity import RoborockEntity

_LOGGER = logging.getLogger(__name__)

COMMAND_SELECT_AREAS = "select_areas"
COMMAND_CLEAN_AREAS = "clean_areas"

_ACTIVITY_BY_STATE: dict[int, VacuumActivity] = {
    OperationalState.STOPPED: VacuumActivity.IDLE,
    OperationalState.RUNNING: VacuumActivity.CLEANING,
    OperationalState.PAUSED: VacuumActivity.PAUSED,
    OperationalState.ERROR: VacuumActivity.ERROR,
    OperationalState.SEEKING_CHARGER: VacuumActivity.RETURNING,
    OperationalState.CHARGING: VacuumActivity.DOCKED,
    OperationalState.DOCKED: VacuumActivity.DOCKED,
}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddConfigEntryEntitiesCallback,
) -> None:
    """Set up the vacuum entity from a config entry."""
    coordinator: RoborockDataUpdateCoordinator = hass.data[DOMAIN][entry.entry_id][
        DATA_COORDINATOR
    ]
    async_add_entities([RoborockVacuum(coordinator, entry)])


class RoborockVacuum(RoborockEntity, StateVacuumEntity):
    """Representation of a Roborock vacuum."""

    _attr_name = None
    _attr_supported_features = (
        VacuumEntityFeature.START
        | VacuumEntityFeature.STOP
        | VacuumEntityFeature.PAUSE
        | VacuumEntityFeature.RETURN_HOME
        | VacuumEntityFeature.LOCATE
        | VacuumEntityFeature.FAN_SPEED
        | VacuumEntityFeature.SEND_COMMAND
    )

    def __init__(
        self, coordinator: RoborockDataUpdateCoordinator, entry: ConfigEntry
    ) -> None:
        """Initialize the vacuum."""
        super().__init__(coordinator, entry, "vacuum", "main")

    @property
    def activity(self) -> VacuumActivity | None:
        state = self.cluster_value("rvcOperationalState", "operationalState")
        if state is None:
            return None
        return _ACTIVITY_BY_STATE.get(int(state))

    @property
    def fan_speed_list(self) -> list[str]:
        return [mode["label"] for mode in self._clean_modes()]

    @property
    def fan_speed(self) -> str | None:
        current = self.cluster_value("rvcCleanMode", "currentMode")
        for mode in self._clean_modes():
            if mode["mode"] == current:
                return mode["label"]
        return None

    @property
    def extra_state_attributes(self) -> Mapping[str, Any]:
        error = self.cluster_value("rvcOperationalState", "operationalError") or {}
        return {
            "selected_areas": self.cluster_value("serviceArea", "selectedAreas") or [],
            "current_area": self.cluster_value("serviceArea", "currentArea"),
            "supported_areas": {
                area["areaId"]: area["areaInfo"]["locationInfo"]["locationName"]
                for area in self.cluster_value("serviceArea", "supportedAreas") or []
            },
            "error": error.get("errorStateLabel"),
        }

    async def async_start(self) -> None:
        await self._execute(Command.CHANGE_RUN_MODE, new_mode=RUN_MODE_CLEANING)

    async def async_stop(self, **kwargs: Any) -> None:
        await self._execute(Command.STOP)

    async def async_pause(self) -> None:
        await self._execute(Command.PAUSE)

    async def async_return_to_base(self, **kwargs: Any) -> None:
        await self._execute(Command.GO_HOME)

    async def async_locate(self, **kwargs: Any) -> None:
        await self._execute(Command.IDENTIFY)

    async def async_set_fan_speed(self, fan_speed: str, **kwargs: Any) -> None:
        for mode in self._clean_modes():
            if mode["label"] == fan_speed:
                await self._execute(Command.CHANGE_CLEAN_MODE, new_mode=mode["mode"])
                return
        raise HomeAssistantError(f"Unsupported fan speed: {fan_speed}")

    async def async_send_command(
        self,
        command: str,
        params: dict[str, Any] | list[Any] | None = None,
        **kwargs: Any,
    ) -> None:
        if command not in (COMMAND_SELECT_AREAS, COMMAND_CLEAN_AREAS):
            raise HomeAssistantError(f"Unsupported command: {command}")
        areas = params.get("areas", []) if isinstance(params, dict) else params or []
        result = await self._execute(Command.SELECT_AREAS, new_areas=areas)
        if result and result.get("status") != SelectAreasStatus.SUCCESS:
            raise HomeAssistantError(result.get("statusText") or "Invalid areas")
        if command == COMMAND_CLEAN_AREAS:
            await self._execute(Command.CHANGE_RUN_MODE, new_mode=RUN_MODE_CLEANING)

    def _clean_modes(self) -> list[dict[str, Any]]:
        return self.cluster_value("rvcCleanMode", "supportedModes") or []

    async def _execute(self, command: Command, **request: Any) -> Any:
        endpoint = self._bridge.endpoint
        if endpoint is None:
            raise HomeAssistantError("The vacuum is not ready")
        try:
            return await endpoint.execute_handler(command, **request)
        except RvcBridgeError as err:
            _LOGGER.warning("Command %s failed: %s", command.value, err)
            raise HomeAssistantError(str(err)) from err
