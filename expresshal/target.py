"""Detection of the GNSS target the device is built around."""

from __future__ import annotations

import enum
import logging
import time
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

LINE_LEN = 100
PROPERTY_VALUE_MAX = 92
QCA1530_DETECT_TIMEOUT = 30
QCA1530_DETECT_PRESENT = "yes"
QCA1530_DETECT_PROGRESS = "detect"
QCA1530_PROPERTY = "persist.qca1530"

APQ8064_ID_1 = "109"
APQ8064_ID_2 = "153"
MPQ8064_ID_1 = "130"
MSM8930_ID_1 = "142"
MSM8930_ID_2 = "116"
APQ8030_ID_1 = "157"
APQ8074_ID_1 = "184"

STR_LIQUID = "Liquid"
STR_SURF = "Surf"
STR_MTP = "MTP"
STR_APQ = "apq"

HW_PLATFORM = "sys/devices/soc0/hw_platform"
SOC_ID = "sys/devices/soc0/soc_id"
HW_PLATFORM_DEP = "sys/devices/system/soc/soc0/hw_platform"
SOC_ID_DEP = "sys/devices/system/soc/soc0/id"
MDM_DEVICE = "dev/mdm"


class GnssTarget(enum.IntEnum):
    """Kind of GNSS engine on the target."""

    NONE = 0
    MSM = 1
    GSS = 2
    MDM = 3
    QCA1530 = 4
    UNKNOWN = 5


class SscType(enum.IntEnum):
    """Whether the target has a sensor subsystem core."""

    NO_SSC = 0
    HAS_SSC = 1


def target_set(gnss: int, ssc: int) -> int:
    """Combine a GNSS kind and an SSC flag into a target code."""
    return (int(gnss) << 1) | int(ssc)


def gnss_type(target: int) -> int:
    """Return the GNSS kind held in a target code."""
    return int(target) >> 1


TARGET_DEFAULT = target_set(GnssTarget.MSM, SscType.HAS_SSC)
TARGET_MDM = target_set(GnssTarget.MDM, SscType.HAS_SSC)
TARGET_APQ_SA = target_set(GnssTarget.GSS, SscType.NO_SSC)
TARGET_MPQ = target_set(GnssTarget.NONE, SscType.NO_SSC)
TARGET_MSM_NO_SSC = target_set(GnssTarget.MSM, SscType.NO_SSC)
TARGET_QCA1530 = target_set(GnssTarget.QCA1530, SscType.NO_SSC)
TARGET_UNKNOWN = target_set(GnssTarget.UNKNOWN, SscType.NO_SSC)


def read_a_line(path: Union[str, Path]) -> str:
    """Return the first line of a file, at most LINE_LEN - 1 characters,
    newline kept. Raises OSError if the file cannot be opened."""
    try:
        with open(path, "r", errors="replace") as stream:
            line = stream.readline(LINE_LEN - 1)
    except OSError as exc:
        logger.error("open failed: %s: %s", path, exc.strerror)
        raise
    logger.debug("cat %s: %s", path, line)
    return line


def _matches(line: str, token: str) -> bool:
    """True if ``line`` holds ``token`` followed by end of string or line."""
    if not line.startswith(token):
        return False
    rest = line[len(token):]
    return rest == "" or rest[0] in "\n\r"


class TargetDetector:
    """Works out the target code from system properties and sysfs files.

    ``get_property(name)`` returns a property's value, or None when unset;
    when no lookup is given every property reads as unset.
    ``root`` is the directory the sysfs and device paths hang from;
    ``sleep`` waits the given number of seconds.
    """

    def __init__(
        self,
        get_property: Optional[Callable[[str], Optional[str]]] = None,
        root: Union[str, Path] = "/",
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._get_property = get_property
        self._root = Path(root)
        self._sleep = sleep
        self._target: Optional[int] = None

    def _property(self, name: str) -> str:
        if self._get_property is None:
            return ""
        value = self._get_property(name)
        if value is None:
            return ""
        return value[: PROPERTY_VALUE_MAX - 1]

    def is_qca1530(self) -> bool:
        """Whether a QCA1530 SoC is configured, waiting while detection runs."""
        detected = False
        for _ in range(QCA1530_DETECT_TIMEOUT):
            value = self._property(QCA1530_PROPERTY)
            logger.debug("qca1530: property %s is set to %s", QCA1530_PROPERTY, value)
            if value == QCA1530_DETECT_PRESENT:
                detected = True
                break
            if value == QCA1530_DETECT_PROGRESS:
                logger.debug("qca1530: SoC detection is in progress.")
                self._sleep(1)
                continue
            break
        logger.debug("qca1530: detected=%s", "true" if detected else "false")
        return detected

    def get_baseband(self) -> str:
        """The value of ``ro.baseband``, empty if unset."""
        baseband = self._property("ro.baseband")
        logger.debug("Baseband: %s", baseband)
        return baseband

    def get_platform_name(self) -> str:
        """The value of ``ro.board.platform``, empty if unset."""
        name = self._property("ro.board.platform")
        logger.debug("Target name: %s", name)
        return name

    def _read_preferred(self, primary: str, fallback: str) -> str:
        path = self._root / primary
        if not path.exists():
            path = self._root / fallback
        try:
            return read_a_line(path)
        except OSError:
            return ""

    def get_target(self) -> Optional[int]:
        """Detect and cache the target code.

        Returns None, without caching, when the hardware platform names an
        external modem but the modem device cannot be read.
        """
        if self._target is not None:
            return self._target

        target: Optional[int]
        if self.is_qca1530():
            target = TARGET_QCA1530
        else:
            baseband = self.get_baseband()
            hw_platform = self._read_preferred(HW_PLATFORM, HW_PLATFORM_DEP)
            soc_id = self._read_preferred(SOC_ID, SOC_ID_DEP)

            if baseband.startswith(STR_APQ):
                target = TARGET_MPQ if _matches(soc_id, MPQ8064_ID_1) else TARGET_APQ_SA
            elif any(_matches(hw_platform, s) for s in (STR_LIQUID, STR_SURF, STR_MTP)):
                try:
                    read_a_line(self._root / MDM_DEVICE)
                    target = TARGET_MDM
                except OSError:
                    target = None
            elif _matches(soc_id, MSM8930_ID_1) or _matches(soc_id, MSM8930_ID_2):
                target = TARGET_MSM_NO_SSC
            else:
                target = TARGET_UNKNOWN

        self._target = target
        logger.debug("HAL: get_target returned %s", target)
        return target