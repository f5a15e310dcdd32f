"""Connection settings.

Settings come from an optional TOML file::

    [ipc]
    socket = "/run/user/1000/sway-ipc.sock"
    timeout = 10

with the socket path falling back to the SWAYSOCK environment variable.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .constants import CONFIG_FILE, DEFAULT_TIMEOUT
from .errors import ConfigError
from .ipc_paths import get_socket_path

if TYPE_CHECKING:
    import logging

__all__ = ["IpcSettings", "load_settings"]


@dataclass
class IpcSettings:
    """Where and how to connect."""

    socket_path: str
    timeout: float = DEFAULT_TIMEOUT


def _read_file(fname: Path, log: logging.Logger | None) -> dict[str, Any]:
    if not fname.exists():
        return {}
    if log:
        log.info("Loading %s", fname)
    with fname.open("rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            if log:
                log.critical("Problem reading %s: %s", fname, e)
            msg = f"Problem reading {fname}: {e}"
            raise ConfigError(msg) from e


def load_settings(
    config_file: str | Path | None = None,
    socket_path: str | None = None,
    environ: Mapping[str, str] | None = None,
    log: logging.Logger | None = None,
) -> IpcSettings:
    """Build the settings from the config file and the environment.

    Args:
        config_file: TOML file to read, defaults to `CONFIG_FILE` (optional file)
        socket_path: explicit socket path, takes precedence over the file and environment
        environ: environment to look into, defaults to `os.environ`
        log: logger for status messages

    Raises:
        ConfigError: unreadable file or invalid values
        EnvMissing: no socket in the file and SWAYSOCK unset
    """
    fname = Path(os.path.expandvars(str(config_file))).expanduser() if config_file else CONFIG_FILE
    if config_file and not fname.exists():
        msg = f"Config file not found: {fname}"
        raise ConfigError(msg)
    section = _read_file(fname, log).get("ipc", {})
    if not isinstance(section, dict):
        msg = "[ipc] must be a table"
        raise ConfigError(msg)

    source = "the socket path given explicitly"
    if socket_path is None:
        socket_path = section.get("socket")
        source = f"ipc.socket in {fname}"
    if socket_path is None:
        socket_path = get_socket_path(environ)
    elif not isinstance(socket_path, str) or not socket_path:
        msg = f"{source} must be a non-empty string, got {socket_path!r}"
        raise ConfigError(msg)

    timeout = section.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, int | float) or timeout <= 0:
        msg = f"ipc.timeout must be a positive number, got {timeout!r}"
        raise ConfigError(msg)

    return IpcSettings(socket_path=os.path.expanduser(socket_path), timeout=float(timeout))
