"""Hardware support utilities: lights and power over sysfs, GPS configuration, target detection, logging, queues and timers."""

__version__ = "0.1.0"

__all__ = [
    "linked_list",
    "msg_q",
    "target",
    "misc_utils",
    "log",
    "config",
    "timer",
    "lights",
    "power",
]