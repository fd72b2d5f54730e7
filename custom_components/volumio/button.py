"""Button entities for Volumio players: Reboot and Shutdown."""

from __future__ import annotations

from homeassistant.components.button import ButtonDeviceClass, ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import CMD_REBOOT, CMD_SHUTDOWN, DOMAIN
from .coordinator import VolumioCoordinator


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    coordinator: VolumioCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        [
            VolumioSystemButton(coordinator, CMD_REBOOT, "Reboot", ButtonDeviceClass.RESTART),
            VolumioSystemButton(coordinator, CMD_SHUTDOWN, "Shutdown", None),
        ]
    )


class VolumioSystemButton(CoordinatorEntity[VolumioCoordinator], ButtonEntity):
    """Send a system command (reboot / shutdown) to the player."""

    _attr_has_entity_name = True
    _attr_entity_category = EntityCategory.CONFIG

    def __init__(
        self,
        coordinator: VolumioCoordinator,
        command: str,
        name: str,
        device_class: ButtonDeviceClass | None,
    ) -> None:
        super().__init__(coordinator)
        self._command = command
        self._attr_unique_id = f"{coordinator.client.host}-{command}"
        self._attr_name = name
        self._attr_device_class = device_class
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, coordinator.client.host)},
            name=f"Volumio {coordinator.client.host}",
            manufacturer="Volumio",
        )

    @property
    def available(self) -> bool:
        return self.coordinator.client.connected

    async def async_press(self) -> None:
        if not await self.coordinator.client.send_system_command(self._command):
            raise HomeAssistantError(f"Failed to send {self._command} to Volumio device")
