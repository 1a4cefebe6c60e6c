"""Power HAL: CPU governor tuning and boost pulses on interaction hints."""

from __future__ import annotations

import enum
import io
import logging
import os
import threading
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

SCALING_GOVERNOR_PATH = "sys/devices/system/cpu/cpu0/cpufreq/scaling_governor"
BOOSTPULSE_INTERACTIVE = "sys/devices/system/cpu/cpufreq/interactive/boostpulse"
GOVERNOR_SIZE = 20

_ONDEMAND = "sys/devices/system/cpu/cpufreq/ondemand/"
_INTERACTIVE = "sys/devices/system/cpu/cpufreq/interactive/"

ONDEMAND_TUNABLES = (
    ("up_threshold", "90"),
    ("io_is_busy", "1"),
    ("sampling_down_factor", "4"),
    ("down_differential", "10"),
    ("up_threshold_multi_core", "70"),
    ("down_differential_multi_core", "3"),
    ("optimal_freq", "918000"),
    ("sync_freq", "1026000"),
    ("up_threshold_any_cpu_load", "80"),
    ("input_boost", "1026000"),
    ("sampling_rate", "50000"),
)

INTERACTIVE_TUNABLES = (
    ("min_sample_time", "90000"),
    ("hispeed_freq", "918000"),
    ("above_hispeed_delay", "30000"),
    ("go_hispeed_load", "90"),
    ("timer_rate", "30000"),
    ("io_is_busy", "1"),
)


class PowerHint(enum.IntEnum):
    """Hints the framework passes to the power HAL."""

    VSYNC = 0x00000001
    INTERACTION = 0x00000002
    VIDEO_ENCODE = 0x00000003
    VIDEO_DECODE = 0x00000004
    LOW_POWER = 0x00000005
    CPU_BOOST = 0x00000010


def sysfs_read(path: Union[str, Path], size: int) -> str:
    """Read at most ``size - 1`` bytes of a file. Raises OSError on failure."""
    try:
        with open(path, "rb") as stream:
            data = stream.read(max(0, size - 1))
    except OSError as exc:
        logger.error("Error reading %s: %s", path, exc.strerror)
        raise
    return data.decode(errors="replace")


def sysfs_write(path: Union[str, Path], value: str) -> bool:
    """Write ``value`` to an existing file; log and return False on failure."""
    try:
        fd = os.open(path, os.O_WRONLY)
    except OSError as exc:
        logger.error("Error opening %s: %s", path, exc.strerror)
        return False
    try:
        os.write(fd, value.encode())
    except OSError as exc:
        logger.error("Error writing to %s: %s", path, exc.strerror)
        return False
    finally:
        os.close(fd)
    return True


class PowerHal:
    """Tunes the CPU governor under ``root`` and boosts it on hints.

    With ``touch_boost`` off, interaction hints no longer boost the CPU.
    """

    def __init__(self, root: Union[str, Path] = "/", touch_boost: bool = True) -> None:
        self._root = Path(root)
        self.touch_boost = touch_boost
        self.governor = ""
        self.interactive = True
        self._lock = threading.Lock()
        self._boostpulse: Optional[io.RawIOBase] = None
        self._boostpulse_warned = False

    def init(self) -> None:
        """Read the current governor and apply its tuning."""
        try:
            self.read_scaling_governor()
        except OSError:
            pass
        self.configure_governor()

    def set_interactive(self, on: Any) -> None:
        """Record whether the device is interactive; no tuning depends on it."""
        self.interactive = bool(on)

    def read_scaling_governor(self) -> str:
        """Read the scaling governor name, without line endings, and keep it."""
        text = sysfs_read(self._root / SCALING_GOVERNOR_PATH, GOVERNOR_SIZE)
        self.governor = text.rstrip("\r\n")
        return self.governor

    def configure_governor(self) -> None:
        """Write the tunables of the current governor."""
        if self.governor.startswith("ondemand"):
            base, tunables = _ONDEMAND, ONDEMAND_TUNABLES
        elif self.governor.startswith("interactive"):
            base, tunables = _INTERACTIVE, INTERACTIVE_TUNABLES
        else:
            return
        for name, value in tunables:
            sysfs_write(self._root / (base + name), value)

    def _boostpulse_open(self) -> Optional[io.RawIOBase]:
        with self._lock:
            if self._boostpulse is None:
                try:
                    self.read_scaling_governor()
                except OSError:
                    logger.error("Can't read scaling governor.")
                    self._boostpulse_warned = True
                else:
                    if self.governor.startswith("interactive"):
                        try:
                            fd = os.open(self._root / BOOSTPULSE_INTERACTIVE, os.O_WRONLY)
                            self._boostpulse = os.fdopen(fd, "wb", buffering=0)
                            logger.debug("Opened %s boostpulse interface", self.governor)
                        except OSError as exc:
                            if not self._boostpulse_warned:
                                logger.debug("Error opening boostpulse: %s", exc.strerror)
                                self._boostpulse_warned = True
                    elif not self._boostpulse_warned:
                        logger.debug("No boostpulse for governor %s", self.governor)
                        self._boostpulse_warned = True
                    self.configure_governor()
            return self._boostpulse

    def power_hint(self, hint: int, data: Any = None) -> None:
        """Handle a hint; CPU boost (and interaction, with touch boost) pulse
        the governor for ``data`` (default 1)."""
        boosting = hint == PowerHint.CPU_BOOST or (
            hint == PowerHint.INTERACTION and self.touch_boost
        )
        if not boosting:
            return
        pulse = self._boostpulse_open()
        if pulse is None:
            return
        duration = 1 if data is None else int(data)
        try:
            pulse.write(str(duration).encode())
        except OSError as exc:
            logger.error("Error writing to boostpulse: %s", exc.strerror)
            with self._lock:
                try:
                    pulse.close()
                except OSError:
                    pass
                self._boostpulse = None
                self._boostpulse_warned = False