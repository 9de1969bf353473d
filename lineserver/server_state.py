import asyncio


class ServerState:
    """
    Bookkeeping owned by the acceptor. Sessions never touch it: they share no state with
    each other, this only lets the server wait for (or cancel) running sessions on shutdown.
    """
    def __init__(self):
        # one task per live session, removed by a done callback when the session ends
        self.tasks: set[asyncio.Task[None]] = set()
        self.total_sessions = 0
