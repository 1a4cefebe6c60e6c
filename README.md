# expresshal

Utilities for driving a phone's lights and CPU governor through sysfs
files, together with the support code a GPS service relies on: a
configuration file reader, a blocking message queue, one-shot timers,
target detection and a level-filtered logger.

Every class that touches files takes a `root` directory (default `/`) and
resolves its sysfs and device paths under it, so the code runs equally
against a real device tree or a temporary directory.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `expresshal.linked_list`: `LinkedList`. `add(data, dealloc=None)` puts an
  item at the head, `remove()` takes the oldest one from the tail, and
  `search(key, equal, remove_if_found=False)` returns the first match from
  the head. `flush()` empties the list, calling each item's `dealloc`.
  Failures raise `LinkedListError` (with a `LinkedListStatus`); an empty
  list raises `ListEmptyError`.
- `expresshal.msg_q`: `MessageQueue`, a thread-safe FIFO. `receive()` blocks
  until a message arrives. `unblock()` wakes every waiter; from then on
  `send` and `receive` raise `QueueUnblockedError`, and so does a second
  `unblock`. `status_from_list_status` maps list status codes to
  `MsgQStatus`.
- `expresshal.target`: `TargetDetector(get_property, root, sleep)` works out
  and caches a target code from system properties and SoC files.
  `target_set` and `gnss_type` build and split target codes; `GnssTarget`
  and `SscType` name their parts; `read_a_line` reads the first line of a
  file.
- `expresshal.misc_utils`: `split_string(raw, max_substrings, delimiter)`
  and `trim_space(text)`.
- `expresshal.log`: `get_name_from_val`, `get_name_from_mask`,
  `get_msg_q_status`, `get_target_name`, `succ_fail_string`, the time
  formatters `get_time` (`HH:MM:SS.mmm`, local time) and `get_timestamp`
  (`HH:MM:SS.uuuuuu`), and `LocLogger`. A debug level of `0xff` means
  "not configured" and lets every message through at its own level; levels
  1 to 5 let through that level and more severe ones. `logger_init`
  configures the shared logger.
- `expresshal.config`: reads `NAME = value` files into a table of
  `ConfigParam` entries of type `ParamType.NUMBER`, `STRING` or `FLOAT`.
  `read_conf_r(stream, table)` fills a table from an open stream;
  `read_conf(path, table)` does the same from a file, then reads
  `DEBUG_LEVEL` and `TIMESTAMP` from it and configures the shared logger.
  Values beginning `0x` are read as hexadecimal; the string `NULL` sets an
  empty string.
- `expresshal.timer`: `LocTimer` and `start_timer(msec, callback,
  user_data)`. After `msec` milliseconds the callback is called on a worker
  thread as `callback(user_data, errno.ETIMEDOUT)`, unless `stop()` came
  first.
- `expresshal.lights`: `LightsModule(root, generic_bln, multi_color_led)`.
  `open(name)` returns the setter for `"backlight"`, `"buttons"` and, when
  enabled, `"notifications"`, `"battery"` and `"attention"`. With
  `multi_color_led` the battery, notification and attention lights share
  one LED in rising priority. `is_lit`, `rgb_to_brightness` and
  `format_blink` are available on their own.
- `expresshal.power`: `PowerHal(root, touch_boost)`. `init()` reads the
  scaling governor and writes the tunables for `ondemand` or `interactive`;
  `power_hint(PowerHint.CPU_BOOST, data)` (and `PowerHint.INTERACTION` when
  `touch_boost` is on) writes a boost pulse to the interactive governor.
  `sysfs_read` and `sysfs_write` are available on their own.

## Examples

```python
from expresshal.lights import LightsModule, LightState

lights = LightsModule(root="/", multi_color_led=True)
set_light = lights.open("backlight")
set_light(LightState(color=0xFFFFFFFF))
```

```python
from expresshal.config import ConfigParam, ParamType, read_conf

table = [ConfigParam("SUPL_HOST", ParamType.STRING)]
read_conf("/etc/gps.conf", table)
print(table[0].value, table[0].is_set)
```

```python
from expresshal.msg_q import MessageQueue

queue = MessageQueue()
queue.send("fix")
print(queue.receive())
```

## What it does not do

This is a library only: it installs no command. It contains no GPS engine,
so it does not produce locations, satellite reports or NMEA sentences; the
queue, timer, configuration and logging helpers are the building blocks
such a service would use. It reads Android system properties only through
the `get_property` callable you give `TargetDetector`.