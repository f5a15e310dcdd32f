"""Message types of the sway / i3 IPC protocol."""

from enum import IntEnum

from .errors import UnknownType

__all__ = ["MessageType"]


class MessageType(IntEnum):
    """Request / reply kinds, valued by their wire ordinal."""

    RUN_COMMAND = 0
    GET_WORKSPACES = 1
    SUBSCRIBE = 2
    GET_OUTPUTS = 3
    GET_TREE = 4
    GET_MARKS = 5
    GET_BAR_CONFIG = 6
    GET_VERSION = 7
    GET_BINDING_MODES = 8
    GET_CONFIG = 9
    SEND_TICK = 10
    SYNC = 11

    @property
    def ordinal(self) -> int:
        """Integer written on the wire for this kind."""
        return int(self.value)

    @classmethod
    def from_ordinal(cls, ordinal: int) -> "MessageType":
        """Resolve a wire ordinal.

        Args:
            ordinal: the integer read from a frame header

        Raises:
            UnknownType: for anything outside 0..11, including bools
        """
        if isinstance(ordinal, bool) or not isinstance(ordinal, int):
            raise UnknownType(ordinal)
        try:
            return cls(ordinal)
        except ValueError as e:
            raise UnknownType(ordinal) from e

    @classmethod
    def from_name(cls, name: str) -> "MessageType":
        """Resolve a user supplied name (`get_outputs`, `get-outputs`, `3`)."""
        text = name.strip()
        if text.isdecimal():
            return cls.from_ordinal(int(text))
        try:
            return cls[text.upper().replace("-", "_")]
        except KeyError as e:
            raise UnknownType(name) from e
