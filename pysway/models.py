"""Typed records for the replies sent by sway."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Generic, TypeVar

from .decoding import U32
from .message_types import MessageType

__all__ = ["ExitCode", "Mode", "Output", "Rect", "Response"]

T = TypeVar("T")


@dataclass(frozen=True)
class Mode:
    """Display timing: size in pixels, refresh rate in mHz."""

    width: U32
    height: U32
    refresh: U32

    @property
    def resolution(self) -> str:
        """Return the size as `WIDTHxHEIGHT`."""
        return f"{self.width}x{self.height}"

    @property
    def refresh_hz(self) -> str:
        """Return the refresh rate in Hz with millihertz precision, eg: `59.951`."""
        return f"{self.refresh // 1000}.{self.refresh % 1000:03}"

    def __str__(self) -> str:
        return f"{self.resolution} @ {self.refresh_hz} Hz"


@dataclass
class Rect:
    """Rectangle in layout coordinates."""

    x: U32
    y: U32
    width: U32
    height: U32


@dataclass
class Output:  # pylint: disable=too-many-instance-attributes
    """A display output as returned by GET_OUTPUTS."""

    active: bool
    id: U32
    name: str
    make: str
    model: str
    serial: str
    scale: float
    transform: str
    current_mode: Mode
    modes: list[Mode] = field(default_factory=list)

    @property
    def description(self) -> str:
        """Return `make model serial`, skipping empty parts."""
        return " ".join(part for part in (self.make, self.model, self.serial) if part)

    def supports(self, mode: Mode) -> bool:
        """Tell if `mode` is one of the advertised modes (exact match)."""
        return mode in self.modes


@dataclass
class Response(Generic[T]):
    """A decoded reply: the resolved message type and its payload."""

    msg_type: MessageType
    content: T


# Exit codes for the CLI
class ExitCode(IntEnum):
    """Standard exit codes for the pysway command."""

    SUCCESS = 0
    USAGE_ERROR = 1  # Invalid arguments, bad config file
    ENV_ERROR = 2  # SWAYSOCK not set
    CONNECTION_ERROR = 3  # Cannot talk to sway
    PROTOCOL_ERROR = 4  # Unexpected or undecodable reply
