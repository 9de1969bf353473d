"""
One LineChannel is created per accepted connection. It is an asyncio.Protocol, so the
event loop pushes bytes into it through the callbacks:
- connection_made(transport): connection is up, the session for it gets started.
- data_received(data): bytes are appended to the read buffer and any waiting reader is woken.
- eof_received(): peer closed its write side. We keep our side open so a pending response can
  still go out, the session closes the transport when it is done.
- connection_lost(exc): connection is gone, either cleanly (exc is None) or with an error.
- pause_writing()/resume_writing(): transport write buffer went over/under its high water mark.

The session pulls from it with read_line()/write_line(), which turn the callback style into
awaitable "one line in, one line out" calls.
"""
import asyncio
import logging
from .config import Config
from .flow_control import FlowControl, HIGH_WATER_LIMIT_READ
from .util import get_remote_addr, format_addr
from ._types import Address, ConnectionCallback

logger = logging.getLogger(__name__)


class ChannelError(Exception):
    """Base class for failures reading or writing a LineChannel."""


class ChannelEOF(ChannelError):
    """The peer closed the stream before a complete line arrived."""


class ChannelTimeout(ChannelError):
    """No complete line arrived before the read deadline."""


class ChannelIOError(ChannelError):
    """Any other transport failure (reset connection, write on a closed transport, ...)."""


class LineTooLong(ChannelIOError):
    pass


class LineChannel(asyncio.Protocol):

    def __init__(self,
                 config: Config,
                 on_connect: ConnectionCallback | None = None,
                 loop: asyncio.AbstractEventLoop | None = None):
        self.loop = loop or asyncio.get_running_loop()
        self.config = config
        self.max_line_length = config.max_line_length
        self.on_connect = on_connect

        # Per-connection state
        self.transport: asyncio.Transport | None = None
        self.flow: FlowControl | None = None
        self.client: Address | None = None
        self.identity = "unknown"

        self._buffer = bytearray()
        self._high_water = max(HIGH_WATER_LIMIT_READ, self.max_line_length + 1)
        self._data_event = asyncio.Event()
        self._eof = False
        self._disconnected = False
        self._exc: Exception | None = None

    def connection_made(self, transport: asyncio.Transport):
        self.transport = transport
        self.flow = FlowControl(transport)
        self.client = get_remote_addr(transport)
        self.identity = format_addr(self.client)
        if self.on_connect is not None:
            self.on_connect(self)

    def data_received(self, data: bytes):
        self._buffer += data
        if len(self._buffer) > self._high_water:
            # stop pulling from the socket until the session has consumed what it has
            self.flow.pause_reading()
        self._data_event.set()

    def eof_received(self):
        self._eof = True
        self._data_event.set()
        return True  # keep the transport open for writing

    def connection_lost(self, exc: Exception | None = None) -> None:
        self._disconnected = True
        self._exc = exc
        self._data_event.set()
        if self.flow is not None:
            self.flow.resume_writing()  # wake any writer blocked in drain()

    def pause_writing(self) -> None:
        """
        Called by the transport when the write buffer exceeds the high water mark
        """
        self.flow.pause_writing()

    def resume_writing(self) -> None:
        """
        Called by the transport when the write buffer goes below the low water mark
        """
        self.flow.resume_writing()

    async def read_line(self, timeout: float) -> str:
        """
        Wait for the next newline-terminated line and return it stripped of the terminator and
        of surrounding whitespace. The deadline is armed when this call starts and only covers
        this one read.
        """
        deadline = self.loop.time() + timeout
        while True:
            line = self._pop_line()
            if line is not None:
                return line

            if self._exc is not None:
                raise ChannelIOError(f"connection lost: {self._exc}") from self._exc
            if self._eof or self._disconnected:
                raise ChannelEOF("peer closed the connection")

            remaining = deadline - self.loop.time()
            if remaining <= 0:
                raise ChannelTimeout(f"no message within {timeout}s")

            self._data_event.clear()
            try:
                await asyncio.wait_for(self._data_event.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                raise ChannelTimeout(f"no message within {timeout}s") from None

    def _pop_line(self) -> str | None:
        index = self._buffer.find(b"\n")
        if index == -1:
            if len(self._buffer) > self.max_line_length:
                raise LineTooLong(
                    f"more than {self.max_line_length} bytes without a line terminator"
                )
            return None
        if index > self.max_line_length:
            raise LineTooLong(f"line of {index} bytes exceeds {self.max_line_length}")

        raw = bytes(self._buffer[:index])
        del self._buffer[:index + 1]
        if len(self._buffer) <= self._high_water:
            self.flow.resume_reading()
        return raw.decode("utf-8", errors="replace").strip()

    async def write_line(self, text: str) -> None:
        if self.transport is None or self.transport.is_closing() or self._disconnected:
            raise ChannelIOError("connection is closed")
        try:
            self.transport.write((text + "\n").encode("utf-8"))
        except (OSError, RuntimeError) as exc:
            raise ChannelIOError(f"write failed: {exc}") from exc
        await self.flow.drain()
        if self._exc is not None:
            raise ChannelIOError(f"connection lost: {self._exc}") from self._exc

    def close(self) -> None:
        if self.transport is not None and not self.transport.is_closing():
            self.transport.close()
