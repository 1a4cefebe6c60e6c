"""Lights module: LCD backlight, button backlight and the notification LED."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, List, Optional, Union

logger = logging.getLogger(__name__)

LCD_FILE = "sys/class/leds/lcd-backlight/brightness"
BUTTON_FILE = "sys/class/leds/button-backlight/brightness"
NOTIFICATION_FILE = "sys/class/misc/backlightnotification/notification_led"
LED_BLINK = "sys/class/sec/led/led_blink"

LIGHT_ID_BACKLIGHT = "backlight"
LIGHT_ID_BUTTONS = "buttons"
LIGHT_ID_NOTIFICATIONS = "notifications"
LIGHT_ID_BATTERY = "battery"
LIGHT_ID_ATTENTION = "attention"

_BLINK_BUFFER = 32

LED_BATTERY = 0
LED_NOTIFICATIONS = 1
LED_ATTENTION = 2


class FlashMode(enum.IntEnum):
    """How a light flashes."""

    NONE = 0
    TIMED = 1
    HARDWARE = 2


@dataclass(frozen=True)
class LightState:
    """Requested state of a light: ARGB colour and flashing pattern."""

    color: int = 0
    flash_mode: int = FlashMode.NONE
    flash_on_ms: int = 0
    flash_off_ms: int = 0


@dataclass
class LedConfig:
    """What the multi-colour LED shows for one of its users."""

    color: int = 0
    delay_on: int = 0
    delay_off: int = 0


def is_lit(state: LightState) -> bool:
    """Whether the state's RGB part is not black."""
    return bool(state.color & 0x00FFFFFF)


def rgb_to_brightness(state: LightState) -> int:
    """Perceived brightness (0-255) of the state's RGB colour."""
    color = state.color & 0x00FFFFFF
    red = (color >> 16) & 0xFF
    green = (color >> 8) & 0xFF
    blue = color & 0xFF
    return (77 * red + 150 * green + 29 * blue) >> 8


def format_blink(led: Optional[LedConfig]) -> str:
    """The line written to the LED blink file; None means the LED is off.

    Raises ValueError if the line would not fit the driver's buffer.
    """
    if led is None:
        led = LedConfig()
    text = f"0x{led.color & 0xFFFFFFFF:08x} {led.delay_on} {led.delay_off}"
    if len(text) >= _BLINK_BUFFER - 1:
        logger.error("format_blink: Truncated string: blink=%r.", text)
        raise ValueError(f"blink string too long: {text!r}")
    logger.debug(
        "format_blink: color=0x%08x, delay_on=%d, delay_off=%d, blink=%r.",
        led.color & 0xFFFFFFFF, led.delay_on, led.delay_off, text,
    )
    return text + "\n"


SetLight = Callable[[LightState], None]


class LightsModule:
    """Drives the device's lights through their sysfs files under ``root``.

    ``generic_bln`` routes notifications to the backlight-notification
    switch; ``multi_color_led`` drives the RGB LED shared, in rising
    priority, by battery, notifications and attention.
    """

    def __init__(
        self,
        root: Union[str, Path] = "/",
        generic_bln: bool = False,
        multi_color_led: bool = False,
    ) -> None:
        if generic_bln and multi_color_led:
            raise ValueError("generic_bln and multi_color_led exclude each other")
        self._root = Path(root)
        self.generic_bln = generic_bln
        self.multi_color_led = multi_color_led
        self._lock = threading.Lock()
        self._leds: List[LedConfig] = [LedConfig() for _ in range(3)]
        self._cur_led = -1
        self._warned = False

    @property
    def current_led(self) -> int:
        """Index of the LED user now shown, or -1 when the LED is off."""
        return self._cur_led

    def open(self, name: str) -> SetLight:
        """Return the function that sets the light called ``name``."""
        lights = {
            LIGHT_ID_BACKLIGHT: self.set_backlight,
            LIGHT_ID_BUTTONS: self.set_buttons,
        }
        if self.generic_bln or self.multi_color_led:
            lights[LIGHT_ID_NOTIFICATIONS] = self.set_notifications
        if self.multi_color_led:
            lights[LIGHT_ID_BATTERY] = self.set_battery
            lights[LIGHT_ID_ATTENTION] = self.set_attention
        try:
            return lights[name]
        except KeyError:
            raise ValueError(f"unsupported light: {name!r}") from None

    def _write(self, relative: str, text: str) -> None:
        path = self._root / relative
        try:
            with open(path, "r+") as stream:
                stream.write(text)
        except OSError:
            if not self._warned:
                logger.error("failed to write %s", path)
                self._warned = True
            raise

    def set_backlight(self, state: LightState) -> None:
        """Set the LCD backlight to the brightness of the state's colour."""
        brightness = rgb_to_brightness(state)
        with self._lock:
            self._write(LCD_FILE, f"{brightness}\n")

    def set_buttons(self, state: LightState) -> None:
        """Set the button backlight to the colour's low byte."""
        with self._lock:
            self._write(BUTTON_FILE, f"{state.color & 0xFF}\n")

    def set_notifications(self, state: LightState) -> None:
        """Show or clear the notification light."""
        if self.generic_bln:
            with self._lock:
                self._write(NOTIFICATION_FILE, "1\n" if is_lit(state) else "0\n")
        elif self.multi_color_led:
            self._set_leds(state, LED_NOTIFICATIONS)
        else:
            raise ValueError("notification light not supported")

    def set_battery(self, state: LightState) -> None:
        """Show or clear the battery light."""
        self._require_led()
        self._set_leds(state, LED_BATTERY)

    def set_attention(self, state: LightState) -> None:
        """Show or clear the attention light, correcting framework quirks."""
        self._require_led()
        fixed = state
        if state.flash_mode == FlashMode.NONE:
            fixed = replace(state, color=0)
        elif state.flash_mode == FlashMode.HARDWARE:
            if state.flash_on_ms > 0 and state.flash_off_ms == 0:
                fixed = replace(state, flash_mode=FlashMode.NONE)
        self._set_leds(fixed, LED_ATTENTION)

    def _require_led(self) -> None:
        if not self.multi_color_led:
            raise ValueError("multi-colour LED not supported")

    def _write_leds(self, led: Optional[LedConfig]) -> None:
        blink = format_blink(led)
        with self._lock:
            self._write(LED_BLINK, blink)

    def _set_leds(self, state: LightState, kind: int) -> None:
        logger.debug(
            "set_light_leds: type=%d, color=0x%010x, fM=%d, fOnMS=%d, fOffMs=%d.",
            kind, state.color, state.flash_mode, state.flash_on_ms, state.flash_off_ms,
        )
        if not 0 <= kind < len(self._leds):
            raise ValueError(f"invalid LED type: {kind}")
        try:
            mode = FlashMode(state.flash_mode)
        except ValueError:
            raise ValueError(f"invalid flash mode: {state.flash_mode}") from None

        led = self._leds[kind]
        if mode is FlashMode.NONE:
            led.delay_on = led.delay_off = 0
        else:
            led.delay_on = state.flash_on_ms
            led.delay_off = state.flash_off_ms
        led.color = state.color & 0x00FFFFFF

        if led.color > 0:
            if kind >= self._cur_led:
                self._cur_led = kind
                self._write_leds(led)
        elif kind == self._cur_led:
            lower = next(
                (i for i in range(kind - 1, -1, -1) if self._leds[i].color > 0), -1
            )
            self._cur_led = lower
            self._write_leds(self._leds[lower] if lower >= 0 else None)