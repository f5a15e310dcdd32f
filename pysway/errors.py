"""Exceptions raised by the IPC client.

Every failure surfaces as a subclass of `IpcError`, so callers can catch the
whole family at once or pick the kind they care about.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .message_types import MessageType

__all__ = [
    "ChannelError",
    "ConfigError",
    "EnvMissing",
    "IpcError",
    "MalformedReply",
    "SerialisationError",
    "UnexpectedResponse",
    "UnknownType",
]


class IpcError(Exception):
    """Base class for all pysway failures."""


class EnvMissing(IpcError):
    """The socket path environment variable is not set."""

    def __init__(self, variable: str) -> None:
        super().__init__(f"{variable} isn't set")
        self.variable = variable


class ChannelError(IpcError):
    """I/O failure on the socket: connect, read, write, timeout or early EOF.

    The original `OSError` (if any) is chained as `__cause__`.
    """


class SerialisationError(IpcError):
    """Payload bytes could not be decoded into the expected shape."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class MalformedReply(IpcError):
    """The frame did not start with the protocol magic marker."""

    def __init__(self, received: bytes) -> None:
        super().__init__(f"Malformed reply: bad magic {received!r}")
        self.received = received


class UnknownType(IpcError):
    """A message type ordinal outside of the known range was received."""

    def __init__(self, ordinal: object) -> None:
        super().__init__(f"Unknown message type received: {ordinal!r}")
        self.ordinal = ordinal


class UnexpectedResponse(IpcError):
    """A typed query got a reply of another message type."""

    def __init__(self, expected: "MessageType", received: "MessageType") -> None:
        super().__init__(f"Expected a {expected.name} reply, received {received.name}")
        self.expected = expected
        self.received = received


class ConfigError(IpcError):
    """The configuration file could not be read or holds invalid values."""
