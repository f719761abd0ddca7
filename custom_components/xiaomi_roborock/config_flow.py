"""Config flow for the Xiaomi Roborock integration."""

from __future__ import annotations

import asyncio
import re
from typing import Any

from rvc_bridge import (
    ConfigError,
    ConnectError,
    RpcCallError,
    UnsupportedDeviceError,
)
from rvc_bridge.transport import RpcMethod, connect
import voluptuous as vol

from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_HOST, CONF_NAME, CONF_TOKEN
from homeassistant.core import callback
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.selector import selector

from .const import CONF_ROOM_NAMES, CONF_SILENT, DEFAULT_NAME, DOMAIN, PROBE_TIMEOUT

_TOKEN_RE = re.compile(r"^[0-9a-fA-F]{32}$")

STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_NAME, default=DEFAULT_NAME): cv.string,
        vol.Required(CONF_HOST): cv.string,
        vol.Required(CONF_TOKEN): selector({"text": {"type": "password"}}),
        vol.Optional(CONF_ROOM_NAMES, default=""): cv.string,
        vol.Optional(CONF_SILENT, default=False): cv.boolean,
    }
)

STEP_REAUTH_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_TOKEN): selector({"text": {"type": "password"}}),
    }
)


def parse_room_names(value: str | list[str] | None) -> list[str]:
    """Split a comma-separated room name field."""
    if not value:
        return []
    parts = value.split(",") if isinstance(value, str) else value
    return [part.strip() for part in parts if part and part.strip()]


async def async_probe_device(host: str, token: str) -> tuple[str, str | None]:
    """Connect once and return (model, serial number)."""
    session = await asyncio.wait_for(connect(host, token), PROBE_TIMEOUT)
    try:
        if not session.is_vacuum:
            raise UnsupportedDeviceError(session.model)
        serial: str | None = None
        try:
            result = await session.call(RpcMethod.GET_SERIAL_NUMBER)
            serial = str(result[0]["serial_number"])
        except (RpcCallError, LookupError, TypeError):
            serial = None
        return session.model, serial
    finally:
        session.destroy()


class RoborockConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Xiaomi Roborock."""

    VERSION = 1
    MINOR_VERSION = 1

    def __init__(self) -> None:
        """Initialize the flow."""
        self._reauth_entry: ConfigEntry | None = None

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlow:
        return RoborockOptionsFlow()

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}
        if user_input is not None:
            host = user_input[CONF_HOST].strip()
            token = user_input[CONF_TOKEN].strip()
            self._async_abort_entries_match({CONF_HOST: host})
            serial = await self._async_validate(host, token, errors)
            if not errors:
                await self.async_set_unique_id(serial or host)
                self._abort_if_unique_id_configured(updates={CONF_HOST: host})
                name = user_input.get(CONF_NAME) or DEFAULT_NAME
                return self.async_create_entry(
                    title=name,
                    data={
                        CONF_NAME: name,
                        CONF_HOST: host,
                        CONF_TOKEN: token,
                    },
                    options={
                        CONF_ROOM_NAMES: parse_room_names(user_input.get(CONF_ROOM_NAMES)),
                        CONF_SILENT: user_input.get(CONF_SILENT, False),
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    async def async_step_reauth(
        self, entry_data: dict[str, Any]
    ) -> ConfigFlowResult:
        """Handle a token change."""
        entry_id = self.context.get("entry_id")
        self._reauth_entry = (
            self.hass.config_entries.async_get_entry(entry_id)
            if entry_id is not None
            else None
        )
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask for a new token."""
        errors: dict[str, str] = {}
        entry = self._reauth_entry
        if entry is None:
            return self.async_abort(reason="missing_context")
        if user_input is not None:
            token = user_input[CONF_TOKEN].strip()
            await self._async_validate(entry.data[CONF_HOST], token, errors)
            if not errors:
                self.hass.config_entries.async_update_entry(
                    entry, data={**entry.data, CONF_TOKEN: token}
                )
                await self.hass.config_entries.async_reload(entry.entry_id)
                return self.async_abort(reason="reauth_successful")

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=STEP_REAUTH_DATA_SCHEMA,
            errors=errors,
        )

    async def _async_validate(
        self, host: str, token: str, errors: dict[str, str]
    ) -> str | None:
        """Probe the device; fill errors and return its serial number."""
        if not _TOKEN_RE.match(token):
            errors["base"] = "invalid_token"
            return None
        try:
            _model, serial = await async_probe_device(host, token)
        except UnsupportedDeviceError:
            errors["base"] = "unsupported_device"
        except ConfigError:
            errors["base"] = "invalid_token"
        except (ConnectError, TimeoutError):
            errors["base"] = "cannot_connect"
        else:
            return serial
        return None


class RoborockOptionsFlow(OptionsFlow):
    """Edit room names and logging options."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        if user_input is not None:
            return self.async_create_entry(
                data={
                    CONF_ROOM_NAMES: parse_room_names(user_input.get(CONF_ROOM_NAMES)),
                    CONF_SILENT: user_input.get(CONF_SILENT, False),
                }
            )
        options = self.config_entry.options
        schema = vol.Schema(
            {
                vol.Optional(
                    CONF_ROOM_NAMES,
                    default=", ".join(options.get(CONF_ROOM_NAMES, [])),
                ): cv.string,
                vol.Optional(
                    CONF_SILENT, default=options.get(CONF_SILENT, False)
                ): cv.boolean,
            }
        )
        return self.async_show_form(step_id="init", data_schema=schema)
