"""
Tests for address helpers.
"""

import pytest

from lineserver.util import format_addr, get_remote_addr


class StubTransport:
    def __init__(self, **extra):
        self.extra = extra

    def get_extra_info(self, name, default=None):
        return self.extra.get(name, default)


class StubSocket:
    def __init__(self, peer=None, error=None):
        self.peer = peer
        self.error = error

    def getpeername(self):
        if self.error:
            raise self.error
        return self.peer


@pytest.mark.parametrize("addr, expected", [
    (("127.0.0.1", 4000), "127.0.0.1:4000"),
    (("::1", 5000), "[::1]:5000"),
    (None, "unknown"),
])
def test_format_addr(addr, expected):
    assert format_addr(addr) == expected


def test_remote_addr_from_socket():
    transport = StubTransport(socket=StubSocket(peer=("10.0.0.1", 1234)))
    assert get_remote_addr(transport) == ("10.0.0.1", 1234)


def test_remote_addr_ipv6_socket_tuple():
    transport = StubTransport(socket=StubSocket(peer=("::1", 1234, 0, 0)))
    assert get_remote_addr(transport) == ("::1", 1234)


def test_remote_addr_from_peername():
    assert get_remote_addr(StubTransport(peername=("10.0.0.2", 99))) == ("10.0.0.2", 99)


def test_remote_addr_when_peer_is_gone():
    transport = StubTransport(socket=StubSocket(error=OSError("not connected")))
    assert get_remote_addr(transport) is None


def test_remote_addr_unknown():
    assert get_remote_addr(StubTransport()) is None
