"""Shared constants for pysway."""

import os
from pathlib import Path

__all__ = [
    "CONFIG_FILE",
    "DEFAULT_TIMEOUT",
    "HEADER_FORMAT",
    "HEADER_SIZE",
    "MAGIC",
    "MAX_PAYLOAD_LEN",
    "SOCKET_ENV_VAR",
]

# Every frame starts with these bytes, in both directions
MAGIC = b"i3-ipc"

# magic, payload length, message type; host byte order, no padding
HEADER_FORMAT = "=6sII"
HEADER_SIZE = 14

MAX_PAYLOAD_LEN = 0xFFFFFFFF

SOCKET_ENV_VAR = "SWAYSOCK"

# Applied separately to reads and writes (seconds)
DEFAULT_TIMEOUT = 30.0

_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
CONFIG_FILE = _xdg_config_home / "pysway" / "config.toml"
