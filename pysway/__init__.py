"""pysway - a client for the sway / i3 IPC protocol.

Opens the compositor's Unix socket, sends typed requests and decodes the
binary framed replies into dataclasses (outputs, modes, rectangles).
Exchanges are strictly lockstep: one request, one reply.
"""

import logging

from .errors import (
    ChannelError,
    ConfigError,
    EnvMissing,
    IpcError,
    MalformedReply,
    SerialisationError,
    UnexpectedResponse,
    UnknownType,
)
from .ipc import AsyncConnection, Connection
from .message_types import MessageType
from .models import Mode, Output, Rect, Response

logging.getLogger("pysway").addHandler(logging.NullHandler())

__all__ = [
    "AsyncConnection",
    "ChannelError",
    "ConfigError",
    "Connection",
    "EnvMissing",
    "IpcError",
    "MalformedReply",
    "MessageType",
    "Mode",
    "Output",
    "Rect",
    "Response",
    "SerialisationError",
    "UnexpectedResponse",
    "UnknownType",
]
