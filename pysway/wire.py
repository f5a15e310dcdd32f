"""Binary framing of the sway / i3 IPC protocol.

A frame is::

    | magic (6 bytes) | length (u32) | type (u32) | payload (length bytes) |

`magic` is the ASCII string `i3-ipc`, `payload` is UTF-8 JSON.

Integers use the *host* byte order. Both peers always run on the same
machine, so this works, but it is not a portable wire contract: talking to
a peer on a different architecture would require switching `HEADER_FORMAT`
to an explicit byte order.
"""

import json
import struct
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from .constants import HEADER_FORMAT, HEADER_SIZE, MAGIC, MAX_PAYLOAD_LEN
from .decoding import decode_as
from .errors import ChannelError, MalformedReply, SerialisationError
from .message_types import MessageType

__all__ = [
    "Frame",
    "check_magic",
    "decode_frame",
    "decode_payload",
    "encode_frame",
    "parse_header",
    "read_frame",
    "read_frame_async",
]

_MAGIC_SIZE = len(MAGIC)
_LENGTH_TYPE = struct.Struct(HEADER_FORMAT[0] + HEADER_FORMAT[-2:])


@dataclass
class Frame:
    """One decoded frame: resolved type and raw payload bytes."""

    msg_type: MessageType
    payload: bytes

    def decode(self, shape: Any = Any) -> Any:  # noqa: ANN401
        """Deserialize the payload into `shape` (see `decode_payload`)."""
        return decode_payload(self.payload, shape)


def encode_frame(msg_type: MessageType, payload: str | bytes = "") -> bytes:
    """Build a request frame.

    Args:
        msg_type: kind of request
        payload: request body, text is UTF-8 encoded

    Raises:
        ValueError: if the payload length does not fit in 32 bits
    """
    body = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
    if len(body) > MAX_PAYLOAD_LEN:
        msg = f"payload too large for one frame ({len(body)} bytes)"
        raise ValueError(msg)
    return struct.pack(HEADER_FORMAT, MAGIC, len(body), MessageType(msg_type).ordinal) + body


def check_magic(data: bytes) -> None:
    """Raise `MalformedReply` unless `data` starts with the magic marker."""
    received = bytes(data[:_MAGIC_SIZE])
    if received != MAGIC:
        raise MalformedReply(received)


def _unpack_length_type(data: bytes) -> tuple[int, int]:
    length, ordinal = _LENGTH_TYPE.unpack(data)
    return length, ordinal


def parse_header(header: bytes) -> tuple[int, MessageType]:
    """Validate a 14 bytes header and return (payload length, message type).

    The magic marker is checked before anything else is interpreted.

    Raises:
        MalformedReply: wrong magic marker
        UnknownType: type ordinal out of range
        ValueError: `header` is not 14 bytes long
    """
    if len(header) != HEADER_SIZE:
        msg = f"header must be {HEADER_SIZE} bytes, got {len(header)}"
        raise ValueError(msg)
    check_magic(header)
    length, ordinal = _unpack_length_type(header[_MAGIC_SIZE:])
    return length, MessageType.from_ordinal(ordinal)


def decode_frame(data: bytes) -> Frame:
    """Decode a complete frame held in memory.

    Trailing bytes after the payload are ignored.

    Raises:
        ChannelError: the buffer ends before the frame does
    """
    if len(data) < _MAGIC_SIZE:
        msg = f"truncated frame header ({len(data)} bytes)"
        raise ChannelError(msg)
    check_magic(data)
    if len(data) < HEADER_SIZE:
        msg = f"truncated frame header ({len(data)} bytes)"
        raise ChannelError(msg)
    length, msg_type = parse_header(data[:HEADER_SIZE])
    payload = data[HEADER_SIZE : HEADER_SIZE + length]
    if len(payload) != length:
        msg = f"truncated frame payload ({len(payload)} of {length} bytes)"
        raise ChannelError(msg)
    return Frame(msg_type, bytes(payload))


def read_frame(read_exactly: Callable[[int], bytes]) -> Frame:
    """Read one frame using a blocking `read_exactly(n)` primitive.

    `read_exactly` must return exactly `n` bytes or raise `ChannelError`.
    The magic marker is read and checked on its own, so a peer sending
    garbage is reported as `MalformedReply` even if it hangs up afterwards.
    The payload is consumed before the type is resolved: an `UnknownType`
    leaves the stream aligned on the next frame.
    """
    check_magic(read_exactly(_MAGIC_SIZE))
    length, ordinal = _unpack_length_type(read_exactly(_LENGTH_TYPE.size))
    payload = read_exactly(length) if length else b""
    return Frame(MessageType.from_ordinal(ordinal), payload)


async def read_frame_async(read_exactly: Callable[[int], Awaitable[bytes]]) -> Frame:
    """Asynchronous version of `read_frame`."""
    check_magic(await read_exactly(_MAGIC_SIZE))
    length, ordinal = _unpack_length_type(await read_exactly(_LENGTH_TYPE.size))
    payload = await read_exactly(length) if length else b""
    return Frame(MessageType.from_ordinal(ordinal), payload)


def decode_payload(payload: bytes, shape: Any = Any) -> Any:  # noqa: ANN401
    """Parse a JSON payload and convert it to `shape`.

    Args:
        payload: raw frame payload
        shape: target type (eg: `list[Output]`), `Any` keeps plain JSON

    Raises:
        SerialisationError: invalid UTF-8, invalid or too deeply nested JSON, wrong structure
    """
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SerialisationError(str(e)) from e
    try:
        value = json.loads(text)
    except (ValueError, RecursionError) as e:
        # ValueError covers JSONDecodeError and integers over the digits limit
        raise SerialisationError(str(e)) from e
    return decode_as(value, shape)
