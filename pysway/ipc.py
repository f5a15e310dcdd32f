"""Interact with sway using its IPC socket.

Two flavours share the same framing code:

- `Connection`: blocking, for scripts and the CLI
- `AsyncConnection`: asyncio streams, for event-loop based callers

Both perform strictly lockstep exchanges: each request writes one frame and
then reads exactly one reply frame. Requests are never pipelined.
"""

__all__ = [
    "AsyncConnection",
    "Connection",
]

import asyncio
import json
import os
import socket
from logging import Logger
from typing import Any, TypeVar

from .config import IpcSettings
from .constants import DEFAULT_TIMEOUT
from .errors import ChannelError, MalformedReply, UnexpectedResponse, UnknownType
from .ipc_paths import get_socket_path
from .logging_setup import get_logger
from .message_types import MessageType
from .models import Output, Response
from .wire import Frame, encode_frame, read_frame, read_frame_async

T = TypeVar("T")

PathLike = str | os.PathLike[str]
Payload = str | bytes | list[Any] | dict[str, Any]


def _serialize(payload: Payload) -> str | bytes:
    """Return the request body, JSON encoding structured payloads."""
    if isinstance(payload, str | bytes):
        return payload
    return json.dumps(payload)


class _ConnectionBase:
    """State and checks common to both connection flavours."""

    def __init__(self, path: str, timeout: float, logger: Logger | None) -> None:
        self.path = path
        self.timeout = timeout
        self.log = logger or get_logger("ipc")
        self._broken: BaseException | None = None

    @property
    def usable(self) -> bool:
        """False once the stream got out of sync with the frame boundaries."""
        return self._broken is None

    def _check_usable(self) -> None:
        if self._broken is not None:
            msg = f"connection to {self.path or 'sway'} is out of sync, reconnect"
            raise ChannelError(msg) from self._broken

    def _encode(self, msg_type: MessageType, payload: Payload) -> bytes:
        body = _serialize(payload)
        self.log.debug("> %s %s", msg_type.name, body)
        return encode_frame(msg_type, body)

    def _received(self, frame: Frame) -> None:
        self.log.debug("< %s (%d bytes)", frame.msg_type.name, len(frame.payload))

    def _mark_broken(self, err: BaseException) -> None:
        if isinstance(err, MalformedReply):
            self.log.error("Malformed reply from %s: %s", self.path, err)
        else:
            self.log.warning("IPC exchange interrupted: %r", err)
        self._broken = err

    def _check_kind(self, expected: MessageType, frame: Frame) -> None:
        if frame.msg_type != expected:
            self.log.error("Expected a %s reply, got %s", expected.name, frame.msg_type.name)
            raise UnexpectedResponse(expected, frame.msg_type)


class Connection(_ConnectionBase):
    """Blocking connection to the sway IPC socket.

    Not thread safe: use one connection per thread, or serialize access.
    """

    def __init__(self, sock: socket.socket, *, path: str = "", timeout: float = DEFAULT_TIMEOUT, logger: Logger | None = None) -> None:
        """Wrap an already connected stream socket.

        Args:
            sock: connected AF_UNIX stream socket (ownership is transferred)
            path: socket path, for messages
            timeout: read and write timeout in seconds
            logger: logger to use, defaults to "pysway.ipc"
        """
        super().__init__(path, timeout, logger)
        self._sock = sock
        self._sock.settimeout(timeout)

    @classmethod
    def connect(cls, path: PathLike | None = None, timeout: float = DEFAULT_TIMEOUT, logger: Logger | None = None) -> "Connection":
        """Open a connection.

        Args:
            path: socket path, defaults to $SWAYSOCK
            timeout: read and write timeout in seconds
            logger: logger to use

        Raises:
            EnvMissing: no path given and SWAYSOCK is unset
            ChannelError: the socket could not be opened
        """
        if path is None:
            path = get_socket_path()
        return cls.connect_with_path(path, timeout=timeout, logger=logger)

    @classmethod
    def connect_with_path(cls, path: PathLike, timeout: float = DEFAULT_TIMEOUT, logger: Logger | None = None) -> "Connection":
        """Open a connection to the socket at `path`."""
        log = logger or get_logger("ipc")
        address = os.fspath(path)
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(timeout)
            sock.connect(address)
        except OSError as e:
            sock.close()
            log.critical("Cannot connect to sway IPC socket %s: %s", address, e)
            msg = f"Cannot connect to {address}: {e}"
            raise ChannelError(msg) from e
        log.debug("Connected to %s", address)
        return cls(sock, path=address, timeout=timeout, logger=log)

    @classmethod
    def from_settings(cls, settings: IpcSettings, logger: Logger | None = None) -> "Connection":
        """Open a connection described by `settings`."""
        return cls.connect_with_path(settings.socket_path, timeout=settings.timeout, logger=logger)

    def _read_exactly(self, size: int) -> bytes:
        chunks = []
        remaining = size
        while remaining:
            try:
                chunk = self._sock.recv(remaining)
            except OSError as e:
                msg = f"read failed: {e}"
                raise ChannelError(msg) from e
            if not chunk:
                msg = f"connection closed by peer ({size - remaining} of {size} bytes read)"
                raise ChannelError(msg)
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _exchange(self, msg_type: MessageType, payload: Payload) -> Frame:
        """Write one request frame and read one reply frame."""
        self._check_usable()
        data = self._encode(msg_type, payload)
        try:
            self._sock.sendall(data)
        except OSError as e:
            # part of the frame may already be on its way
            msg = f"write failed: {e}"
            err = ChannelError(msg)
            self._mark_broken(err)
            raise err from e
        try:
            frame = read_frame(self._read_exactly)
        except UnknownType:
            raise
        except BaseException as e:
            self._mark_broken(e)
            raise
        self._received(frame)
        return frame

    def request(self, msg_type: MessageType, payload: Payload = "", shape: Any = Any) -> Response[Any]:  # noqa: ANN401
        """Send a request and return the reply, whatever its type.

        Args:
            msg_type: kind of request
            payload: request body (lists and dicts are sent as JSON)
            shape: type to decode the reply payload into, plain JSON by default

        Raises:
            ChannelError: socket failure, timeout or out of sync connection
            MalformedReply: the reply has no magic marker
            UnknownType: the reply type is unknown
            SerialisationError: the payload does not match `shape`
        """
        frame = self._exchange(msg_type, payload)
        return Response(frame.msg_type, frame.decode(shape))

    def query(self, msg_type: MessageType, shape: type[T], payload: Payload = "") -> T:
        """Send a request and decode a reply of the same message type into `shape`.

        Raises:
            UnexpectedResponse: the reply has a different message type
        """
        frame = self._exchange(msg_type, payload)
        self._check_kind(msg_type, frame)
        return frame.decode(shape)  # type: ignore[no-any-return]

    def query_outputs(self) -> list[Output]:
        """Return the outputs known to the compositor."""
        return self.query(MessageType.GET_OUTPUTS, list[Output])  # type: ignore[arg-type]

    def run_command(self, command: str) -> list[dict[str, Any]]:
        """Run sway commands, returning one status object per command."""
        return self.query(MessageType.RUN_COMMAND, list[dict[str, Any]], command)  # type: ignore[arg-type]

    def close(self) -> None:
        """Close the socket."""
        self._sock.close()

    @property
    def closed(self) -> bool:
        """Tell if the socket is closed."""
        return self._sock.fileno() == -1

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


class AsyncConnection(_ConnectionBase):
    """asyncio connection to the sway IPC socket.

    Concurrent requests from several tasks are serialized on an internal lock.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        path: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        logger: Logger | None = None,
    ) -> None:
        super().__init__(path, timeout, logger)
        self._reader = reader
        self._writer = writer
        self._lock = asyncio.Lock()

    @classmethod
    async def connect(cls, path: PathLike | None = None, timeout: float = DEFAULT_TIMEOUT, logger: Logger | None = None) -> "AsyncConnection":
        """Open a connection, defaulting to $SWAYSOCK.

        Raises:
            EnvMissing: no path given and SWAYSOCK is unset
            ChannelError: the socket could not be opened
        """
        log = logger or get_logger("ipc")
        address = os.fspath(path) if path is not None else get_socket_path()
        try:
            reader, writer = await asyncio.wait_for(asyncio.open_unix_connection(address), timeout)
        except OSError as e:
            log.critical("Cannot connect to sway IPC socket %s: %s", address, e)
            msg = f"Cannot connect to {address}: {e}"
            raise ChannelError(msg) from e
        log.debug("Connected to %s", address)
        return cls(reader, writer, path=address, timeout=timeout, logger=log)

    async def _read_exactly(self, size: int) -> bytes:
        try:
            return await asyncio.wait_for(self._reader.readexactly(size), self.timeout)
        except asyncio.IncompleteReadError as e:
            msg = f"connection closed by peer ({len(e.partial)} of {size} bytes read)"
            raise ChannelError(msg) from e
        except OSError as e:
            msg = f"read failed: {e!r}"
            raise ChannelError(msg) from e

    async def _exchange(self, msg_type: MessageType, payload: Payload) -> Frame:
        async with self._lock:
            self._check_usable()
            data = self._encode(msg_type, payload)
            try:
                self._writer.write(data)
                await asyncio.wait_for(self._writer.drain(), self.timeout)
            except OSError as e:
                msg = f"write failed: {e!r}"
                err = ChannelError(msg)
                self._mark_broken(err)
                raise err from e
            except BaseException as e:
                self._mark_broken(e)
                raise
            try:
                frame = await read_frame_async(self._read_exactly)
            except UnknownType:
                raise
            except BaseException as e:
                # cancelled or failed mid-frame: what is left of the reply is unread
                self._mark_broken(e)
                raise
        self._received(frame)
        return frame

    async def request(self, msg_type: MessageType, payload: Payload = "", shape: Any = Any) -> Response[Any]:  # noqa: ANN401
        """Send a request and return the reply, whatever its type."""
        frame = await self._exchange(msg_type, payload)
        return Response(frame.msg_type, frame.decode(shape))

    async def query(self, msg_type: MessageType, shape: type[T], payload: Payload = "") -> T:
        """Send a request and decode a reply of the same message type into `shape`."""
        frame = await self._exchange(msg_type, payload)
        self._check_kind(msg_type, frame)
        return frame.decode(shape)  # type: ignore[no-any-return]

    async def query_outputs(self) -> list[Output]:
        """Return the outputs known to the compositor."""
        return await self.query(MessageType.GET_OUTPUTS, list[Output])  # type: ignore[arg-type]

    async def run_command(self, command: str) -> list[dict[str, Any]]:
        """Run sway commands, returning one status object per command."""
        return await self.query(MessageType.RUN_COMMAND, list[dict[str, Any]], command)  # type: ignore[arg-type]

    async def close(self) -> None:
        """Close the stream."""
        self._writer.close()
        await self._writer.wait_closed()

    async def __aenter__(self) -> "AsyncConnection":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()
