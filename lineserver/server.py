from typing import Generator
from types import FrameType
import asyncio
import signal
import sys
import logging
import contextlib
import threading
import click
from .config import Config
from .server_state import ServerState
from .line_channel import LineChannel
from .session import Session


HANDLED_SIGNALS = {
    signal.SIGINT: "SIGINT",
    signal.SIGTERM: "SIGTERM",
}
if sys.platform == "win32":
    HANDLED_SIGNALS[signal.SIGBREAK] = "SIGBREAK"


logger = logging.getLogger(__name__)


class Server:
    def __init__(self, config: Config):
        self.config = config
        self.server_state = ServerState()
        self.started = False
        self.should_exit = False
        self.force_exit = False
        self._captured_signals: list[int] = []
        self.server: asyncio.AbstractServer | None = None

    def run(self) -> None:
        return asyncio.run(self.serve())

    async def serve(self) -> None:
        with self.capture_signals():
            await self._serve()

    async def _serve(self):
        logger.info("Starting server...")
        await self.startup()
        if self.should_exit:
            return
        await self.main_loop()
        await self.shutdown()
        logger.info("Server shutdown complete!")

    async def startup(self) -> None:
        loop = asyncio.get_running_loop()
        try:
            server = await loop.create_server(
                lambda: LineChannel(self.config, on_connect=self.on_connection),
                host=self.config.host,
                port=self.config.port,
                backlog=self.config.backlog,
            )
        except OSError as exc:
            logger.error("Failed to listen on port %d: %s", self.config.port, exc)
            sys.exit(1)

        self.server = server
        self.started = True
        self._log_startup_message(server.sockets[0])

    @property
    def port(self) -> int | None:
        """Port actually bound, useful when the configured port is 0."""
        if self.server is None or not self.server.sockets:
            return None
        return self.server.sockets[0].getsockname()[1]

    def _log_startup_message(self, listener):
        addr_format = "%s:%d"
        host = "0.0.0.0" if self.config.host is None else self.config.host
        if ":" in host:
            # It's an IPv6 address.
            addr_format = "[%s]:%d"

        port = self.config.port
        if port == 0:
            port = listener.getsockname()[1]

        message = f"Server listening on {addr_format} (Press CTRL+C to quit)"
        color_message = "Server listening on " + click.style(addr_format, bold=True) + " (Press CTRL+C to quit)"
        logger.info(
            message,
            host,
            port,
            extra={"color_message": color_message},
        )

    def on_connection(self, channel: LineChannel) -> None:
        """
        Called from LineChannel.connection_made for every accepted connection. Spawns the session
        task and forgets about it apart from keeping a handle for shutdown.
        """
        session = Session(channel, self.config)
        task = asyncio.get_running_loop().create_task(session.run())
        self.server_state.tasks.add(task)
        self.server_state.total_sessions += 1
        task.add_done_callback(self._session_done)

    def _session_done(self, task: asyncio.Task[None]) -> None:
        self.server_state.tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Session task crashed: %s", exc, exc_info=exc)

    async def main_loop(self) -> None:
        """
        Poll for the exit flag instead of awaiting serve_forever(), so signal handlers only need
        to flip should_exit. The event loop keeps accepting connections and running sessions
        while this sleeps.
        """
        while not self.should_exit:
            await asyncio.sleep(0.1)

    async def shutdown(self) -> None:
        logger.info("Shutting down server...")
        # Stop accepting new connections, running sessions are left to finish on their own.
        self.server.close()

        try:
            await asyncio.wait_for(
                self._wait_tasks_to_complete(),
                timeout=self.config.timeout_graceful_shutdown
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Graceful shutdown timed out. Forcing exit."
            )

        # Left over only on force exit or when the graceful timeout ran out.
        pending = [t for t in self.server_state.tasks if not t.done()]
        for t in pending:
            t.cancel(msg="Session cancelled during shutdown")
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        await self.server.wait_closed()
        logger.info("Served %d session(s)", self.server_state.total_sessions)

    async def _wait_tasks_to_complete(self) -> None:
        # Every session ends by itself at the latest one inactivity timeout after its last message.
        if self.server_state.tasks and not self.force_exit:
            logger.info("Waiting for %d session(s) to close. (CTRL+C to force quit)",
                        len(self.server_state.tasks))
            while self.server_state.tasks and not self.force_exit:
                await asyncio.sleep(0.1)

    # signal handling
    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        """
        Signals can only be listened to from the main thread
        """
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        original_handlers = {sig: signal.signal(sig, self.handle_exit) for sig in HANDLED_SIGNALS.keys()}
        try:
            yield
        finally:
            # Restore original signal handlers
            for sig, handler in original_handlers.items():
                signal.signal(sig, handler)
            # Raise captured signals in reverse order to ensure proper handling
            for captured_signal in reversed(self._captured_signals):
                signal.raise_signal(captured_signal)

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        self._captured_signals.append(sig)
        if self.should_exit and sig == signal.SIGINT:
            self.force_exit = True
        else:
            self.should_exit = True
