"""Reading ``NAME = value`` configuration files into parameter tables."""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional, TextIO, Union

from expresshal.log import LocLogger, logger_init
from expresshal.misc_utils import trim_space

logger = logging.getLogger(__name__)

LOC_MAX_PARAM_NAME = 48
LOC_MAX_PARAM_STRING = 80
LOC_MAX_PARAM_LINE = 80

_LONG_MAX = 2**63 - 1
_LONG_MIN = -(2**63)

_ATOI_RE = re.compile(r"\s*([+-]?\d+)")
_ATOF_RE = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_STRTOL16_RE = re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]+)")


class ParamType(str, enum.Enum):
    """Kind of value a configuration parameter holds."""

    NUMBER = "n"
    STRING = "s"
    FLOAT = "f"


@dataclass
class ConfigParam:
    """One entry of a configuration table.

    ``value`` receives the parsed value; ``is_set`` tells whether the last
    read set it.
    """

    name: str
    param_type: ParamType
    value: Any = None
    is_set: bool = False

    def __post_init__(self) -> None:
        self.param_type = ParamType(self.param_type)


@dataclass
class ConfigValue:
    """A ``NAME = value`` pair read from a file, with its numeric readings."""

    name: str
    str_value: str
    int_value: int = 0
    double_value: float = 0.0


def _to_int32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


def _atoi(text: str) -> int:
    match = _ATOI_RE.match(text)
    return _to_int32(int(match.group(1))) if match else 0


def _atof(text: str) -> float:
    match = _ATOF_RE.match(text)
    return float(match.group(1)) if match else 0.0


def _strtol16(text: str) -> int:
    match = _STRTOL16_RE.match(text)
    if not match:
        return 0
    value = int(match.group(2), 16)
    if match.group(1) == "-":
        value = -value
    value = max(_LONG_MIN, min(_LONG_MAX, value))
    return _to_int32(value)


def parse_line(line: str) -> Optional[ConfigValue]:
    """Parse one line into a ConfigValue, or None if it holds no pair.

    The name is the first run of characters without ``=``, the value the
    second; both are trimmed. A value starting ``0x`` is read as hex.
    """
    tokens = [token for token in line.split("=") if token]
    if len(tokens) < 2:
        return None
    name = trim_space(tokens[0])
    str_value = trim_space(tokens[1])
    value = ConfigValue(name=name, str_value=str_value)
    if len(str_value) >= 3 and str_value[0] == "0" and str_value[1].lower() == "x":
        value.int_value = _strtol16(str_value[2:])
    else:
        value.double_value = _atof(str_value)
        value.int_value = _atoi(str_value)
    return value


def set_config_entry(entry: ConfigParam, value: ConfigValue) -> bool:
    """Store ``value`` in ``entry`` if their names match; return whether it did."""
    if entry is None or value is None:
        logger.error("set_config_entry: INVALID config entry or parameter")
        raise ValueError("config entry and value must not be None")
    if entry.name != value.name:
        return False
    if entry.param_type is ParamType.STRING:
        if value.str_value == "NULL":
            entry.value = ""
        else:
            entry.value = value.str_value[:LOC_MAX_PARAM_STRING]
        logger.debug("PARAM %s = %s", entry.name, entry.value)
    elif entry.param_type is ParamType.NUMBER:
        entry.value = value.int_value
        logger.debug("PARAM %s = %d", entry.name, value.int_value)
    else:
        entry.value = value.double_value
        logger.debug("PARAM %s = %f", entry.name, value.double_value)
    entry.is_set = True
    return True


def read_conf_r(stream: TextIO, table: Iterable[ConfigParam]) -> None:
    """Fill ``table`` from ``stream``, stopping once every entry was set.

    Lines are read in chunks of at most LOC_MAX_PARAM_LINE - 1 characters.
    """
    if stream is None:
        logger.error("read_conf_r: ERROR: File pointer is NULL")
        raise ValueError("stream must not be None")
    entries = list(table)
    for entry in entries:
        entry.is_set = False
    remaining = len(entries)
    logger.debug("num_params: %d", remaining)
    while remaining != 0:
        line = stream.readline(LOC_MAX_PARAM_LINE - 1)
        if not line:
            logger.debug("end of configuration reached")
            break
        value = parse_line(line)
        if value is None:
            continue
        for entry in entries:
            if set_config_entry(entry, value):
                remaining -= 1


_DEBUG_LEVEL = ConfigParam("DEBUG_LEVEL", ParamType.NUMBER, 0xFF)
_TIMESTAMP = ConfigParam("TIMESTAMP", ParamType.NUMBER, 0)
_LOGGER_TABLE = (_DEBUG_LEVEL, _TIMESTAMP)


def read_conf(path: Union[str, Path], table: Iterable[ConfigParam] = ()) -> LocLogger:
    """Fill ``table`` and the logger settings from the file at ``path``.

    A file that cannot be opened leaves everything as it was. The shared
    logger is then configured from DEBUG_LEVEL and TIMESTAMP and returned.
    """
    entries = list(table or ())
    try:
        with open(path, "r", errors="replace") as stream:
            logger.debug("using %s", path)
            if entries:
                read_conf_r(stream, entries)
                stream.seek(0)
            read_conf_r(stream, _LOGGER_TABLE)
    except OSError:
        pass
    return logger_init(_DEBUG_LEVEL.value, _TIMESTAMP.value)