"""Name lookup tables, time strings and the level-filtered location logger."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional, Tuple, Union

from expresshal.msg_q import MsgQStatus
from expresshal.target import GnssTarget, SscType, gnss_type

_log = logging.getLogger(__name__)

UNKNOWN_STR = "UNKNOWN"

VOID_RET = "None"
FROM_AFW = "===>"
TO_MODEM = "--->"
FROM_MODEM = "<---"
TO_AFW = "<==="
EXIT_TAG = "Exiting"
ENTRY_TAG = "Entering"
BOOL_STR = ("False", "True")

DEBUG_LEVEL_UNSET = 0xFF

NameValTable = Iterable[Tuple[str, int]]

MSG_Q_STATUS_NAMES: Tuple[Tuple[str, int], ...] = (
    ("eMSG_Q_SUCCESS", MsgQStatus.SUCCESS),
    ("eMSG_Q_FAILURE_GENERAL", MsgQStatus.FAILURE_GENERAL),
    ("eMSG_Q_INVALID_PARAMETER", MsgQStatus.INVALID_PARAMETER),
    ("eMSG_Q_INVALID_HANDLE", MsgQStatus.INVALID_HANDLE),
    ("eMSG_Q_UNAVAILABLE_RESOURCE", MsgQStatus.UNAVAILABLE_RESOURCE),
    ("eMSG_Q_INSUFFICIENT_BUFFER", MsgQStatus.INSUFFICIENT_BUFFER),
)

TARGET_NAMES: Tuple[Tuple[str, int], ...] = (
    ("GNSS_NONE", GnssTarget.NONE),
    ("GNSS_MSM", GnssTarget.MSM),
    ("GNSS_GSS", GnssTarget.GSS),
    ("GNSS_MDM", GnssTarget.MDM),
    ("GNSS_QCA1530", GnssTarget.QCA1530),
    ("GNSS_UNKNOWN", GnssTarget.UNKNOWN),
)


def get_name_from_mask(table: NameValTable, mask: int) -> str:
    """Name of the first entry whose value shares a bit with ``mask``."""
    for name, val in table:
        if int(val) & int(mask):
            return name
    return UNKNOWN_STR


def get_name_from_val(table: NameValTable, value: int) -> str:
    """Name of the first entry whose value equals ``value``."""
    for name, val in table:
        if int(val) == int(value):
            return name
    return UNKNOWN_STR


def get_msg_q_status(status: int) -> str:
    """Name of a message queue status code."""
    return get_name_from_val(MSG_Q_STATUS_NAMES, status)


def succ_fail_string(is_succ: object) -> str:
    """``"successful"`` for a true value, ``"failed"`` otherwise."""
    return "successful" if is_succ else "failed"


def get_target_name(target: int) -> str:
    """Describe a target code, e.g. ``" GNSS_MSM with SSC"``."""
    index = gnss_type(target)
    if index >= len(TARGET_NAMES) or index < 0:
        index = len(TARGET_NAMES) - 1
    name = get_name_from_val(TARGET_NAMES, index)
    if (int(target) & SscType.HAS_SSC) == SscType.HAS_SSC:
        return f" {name} with SSC"
    return f" {name}  without SSC"


def get_time(now: Optional[datetime] = None) -> str:
    """Local wall-clock time as ``HH:MM:SS.mmm``."""
    if now is None:
        now = datetime.now()
    return f"{now.strftime('%H:%M:%S')}.{now.microsecond // 1000:03d}"


def get_timestamp(now: Optional[float] = None) -> str:
    """Time of day of an epoch instant (UTC) as ``HH:MM:SS.uuuuuu``."""
    if now is None:
        now = datetime.now().timestamp()
    seconds = int(now)
    micros = int(round((now - seconds) * 1_000_000))
    if micros >= 1_000_000:
        seconds += 1
        micros -= 1_000_000
    hh = seconds // 3600 % 24
    mm = (seconds % 3600) // 60
    ss = seconds % 60
    return f"{hh:02d}:{mm:02d}:{ss:02d}.{micros:06d}"


# level letter -> (lowest debug level that enables it, level used when unset)
_LEVELS = {
    "E": (1, logging.ERROR),
    "W": (2, logging.WARNING),
    "I": (3, logging.INFO),
    "D": (4, logging.DEBUG),
    "V": (5, logging.DEBUG),
}
_LEVEL_BY_NUMBER = {threshold: letter for letter, (threshold, _) in _LEVELS.items()}


class LocLogger:
    """Filters messages by a configured debug level (1 to 5).

    A debug level of 0xff means "not configured": every message then goes
    out at its own logging level. A configured level lets through messages
    of that level and more severe ones, all at error level.
    """

    def __init__(self, debug_level: int = DEBUG_LEVEL_UNSET, timestamp: int = 0) -> None:
        self.debug_level = debug_level
        self.timestamp = timestamp

    def configure(self, debug_level: int, timestamp: int) -> None:
        """Set the debug level and the timestamp flag."""
        self.debug_level = debug_level
        self.timestamp = timestamp

    def log(self, level: Union[str, int], message: str) -> Optional[str]:
        """Log ``message`` at ``level`` (E, W, I, D, V or 1-5).

        Returns the line logged, or None when the level filters it out.
        """
        letter = _LEVEL_BY_NUMBER.get(level) if isinstance(level, int) else str(level).upper()
        if letter not in _LEVELS:
            raise ValueError(f"unknown log level: {level!r}")
        threshold, own_level = _LEVELS[letter]
        line = f"{letter}/{message}"
        if threshold <= self.debug_level <= 5:
            _log.error("%s", line)
            return line
        if self.debug_level == DEBUG_LEVEL_UNSET:
            _log.log(own_level, "%s", line)
            return line
        return None


loc_logger = LocLogger()


def logger_init(debug_level: int, timestamp: int) -> LocLogger:
    """Configure the shared logger and return it."""
    loc_logger.configure(debug_level, timestamp)
    return loc_logger