"""Socket path lookup."""

import os
from collections.abc import Mapping

from .constants import SOCKET_ENV_VAR
from .errors import EnvMissing

__all__ = ["get_socket_path"]


def get_socket_path(environ: Mapping[str, str] | None = None) -> str:
    """Return the IPC socket path advertised by the compositor.

    Args:
        environ: environment to look into, defaults to `os.environ`

    Raises:
        EnvMissing: if SWAYSOCK is unset or empty
    """
    env = os.environ if environ is None else environ
    path = env.get(SOCKET_ENV_VAR)
    if not path:
        raise EnvMissing(SOCKET_ENV_VAR)
    return path
