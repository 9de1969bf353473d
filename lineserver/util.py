from asyncio import Transport
from ._types import Address


def get_remote_addr(transport: Transport) -> Address | None:
    socket_info = transport.get_extra_info("socket")
    if socket_info is not None:
        try:
            info = socket_info.getpeername()
        except OSError:
            # peer already gone before we looked
            info = None
        return (str(info[0]), int(info[1])) if isinstance(info, tuple) else None

    info = transport.get_extra_info("peername")
    if info is not None and isinstance(info, (list, tuple)) and len(info) >= 2:
        return (str(info[0]), int(info[1]))
    return None


def format_addr(addr: Address | None) -> str:
    """
    host:port for IPv4, [host]:port for IPv6. The brackets keep IPv6 identities
    (and the log file names derived from them) apart from IPv4 ones.
    """
    if addr is None:
        return "unknown"
    host, port = addr
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
