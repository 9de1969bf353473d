"""
pytest configuration and fixtures.
"""

import asyncio
from typing import AsyncGenerator
import pytest
import pytest_asyncio

from lineserver.config import Config
from lineserver.server import Server


@pytest.fixture
def config(tmp_path) -> Config:
    """Test configuration: loopback, OS-picked port, short inactivity timeout."""
    return Config(
        host="127.0.0.1",
        port=0,
        inactivity_timeout=0.5,
        max_line_length=64,
        log_dir=str(tmp_path),
    )


@pytest_asyncio.fixture
async def running_server(config: Config) -> AsyncGenerator[Server, None]:
    """A started server. Any session still open at teardown is cancelled."""
    server = Server(config)
    await server.startup()

    yield server

    server.force_exit = True
    await server.shutdown()


class LineClient:
    """Minimal newline-delimited client used by the end-to-end tests."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.reader = reader
        self.writer = writer

    @classmethod
    async def connect(cls, port: int) -> "LineClient":
        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        return cls(reader, writer)

    @property
    def local_port(self) -> int:
        return self.writer.get_extra_info("sockname")[1]

    async def send(self, line: str) -> None:
        self.writer.write(line.encode("utf-8") + b"\n")
        await self.writer.drain()

    async def recv(self, timeout: float = 5.0) -> str:
        data = await asyncio.wait_for(self.reader.readline(), timeout=timeout)
        return data.decode("utf-8")

    async def request(self, line: str) -> str:
        await self.send(line)
        return (await self.recv()).rstrip("\n")

    async def at_eof(self, timeout: float = 5.0) -> bool:
        data = await asyncio.wait_for(self.reader.read(), timeout=timeout)
        return data == b""

    async def close(self) -> None:
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except ConnectionError:
            pass


@pytest.fixture
def connect(running_server: Server):
    """Factory that opens clients against the running server and closes them afterwards."""
    clients: list[LineClient] = []

    async def _connect() -> LineClient:
        client = await LineClient.connect(running_server.port)
        clients.append(client)
        return client

    yield _connect

    for client in clients:
        client.writer.close()
