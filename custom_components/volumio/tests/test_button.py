"""Tests for the Volumio reboot / shutdown buttons."""
from __future__ import annotations

import pytest

from homeassistant.components.button import ButtonDeviceClass
from homeassistant.exceptions import HomeAssistantError

from custom_components.volumio.button import VolumioSystemButton


@pytest.mark.asyncio
async def test_button_properties(mock_coordinator):
    """Buttons are keyed by host and command."""
    reboot = VolumioSystemButton(mock_coordinator, "reboot", "Reboot", ButtonDeviceClass.RESTART)
    assert reboot.unique_id == "192.168.1.50-reboot"
    assert reboot.device_class == ButtonDeviceClass.RESTART
    assert reboot.available is True

    mock_coordinator.client.connected = False
    assert reboot.available is False


@pytest.mark.asyncio
async def test_button_press(mock_coordinator, mock_client):
    """Pressing sends the system command."""
    shutdown = VolumioSystemButton(mock_coordinator, "shutdown", "Shutdown", None)
    await shutdown.async_press()
    mock_client.send_system_command.assert_called_once_with("shutdown")


@pytest.mark.asyncio
async def test_button_press_dropped(mock_coordinator, mock_client):
    """A dropped command is reported to the user."""
    mock_client.send_system_command.return_value = False
    reboot = VolumioSystemButton(mock_coordinator, "reboot", "Reboot", ButtonDeviceClass.RESTART)
    with pytest.raises(HomeAssistantError):
        await reboot.async_press()
