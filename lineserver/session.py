"""
The lifetime of one client connection.

    ACTIVE  -- read a line (fresh inactivity deadline for every read)
            -- append it to the client's log
            -- decide() the response and write it back
            -- stay ACTIVE unless the response ends the session
    CLOSING -- entered on /quit, bye, read timeout, EOF or any read error
    CLOSED  -- log released, socket closed. Nothing leaves this state.

Only the read timeout produces a notice to the client. A failed response write is logged and the
loop carries on; the next read surfaces the broken connection.
"""
import enum
import logging
from datetime import datetime
from .config import Config
from .line_channel import LineChannel, ChannelError, ChannelEOF, ChannelTimeout
from .router import decide
from .session_log import SessionLog, NullSessionLog, open_session_log
from ._types import Clock

logger = logging.getLogger(__name__)

TIMEOUT_NOTICE = "Connection timed out due to inactivity"


class SessionState(enum.Enum):
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


def _local_now() -> datetime:
    return datetime.now().astimezone()


class Session:

    def __init__(self,
                 channel: LineChannel,
                 config: Config,
                 clock: Clock | None = None):
        self.channel = channel
        self.config = config
        self.clock = clock or _local_now
        self.client = channel.identity
        self.state = SessionState.ACTIVE
        self.log: SessionLog = NullSessionLog()

    async def run(self) -> None:
        self.log = open_session_log(self.client, self.config.log_dir)
        logger.info("Client connected: %s", self.client)
        try:
            while self.state is SessionState.ACTIVE:
                await self.step()
        finally:
            self.close()

    async def step(self) -> None:
        try:
            message = await self.channel.read_line(self.config.inactivity_timeout)
        except ChannelTimeout:
            logger.info("Client %s timed out", self.client)
            await self.send(TIMEOUT_NOTICE)
            self.state = SessionState.CLOSING
            return
        except ChannelEOF:
            logger.info("Client %s closed the connection", self.client)
            self.state = SessionState.CLOSING
            return
        except ChannelError as exc:
            logger.info("Error reading from client %s: %s", self.client, exc)
            self.state = SessionState.CLOSING
            return

        logger.info("Received from %s: %s", self.client, message)
        self.log.append(self.clock(), message)

        result = decide(message, self.clock)
        await self.send(result.response)
        if result.terminate:
            self.state = SessionState.CLOSING

    async def send(self, text: str) -> bool:
        try:
            await self.channel.write_line(text)
        except ChannelError as exc:
            logger.warning("Failed to write to client %s: %s", self.client, exc)
            return False
        return True

    def close(self) -> None:
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSING
        self.log.close()
        self.channel.close()
        self.state = SessionState.CLOSED
        logger.info("Client disconnected: %s", self.client)
