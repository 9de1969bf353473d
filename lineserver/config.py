INACTIVITY_TIMEOUT = 30.0
MAX_LINE_LENGTH = 1024
DEFAULT_PORT = 4000


class Config:

    def __init__(
            self,
            host: str | None = None,
            port: int = DEFAULT_PORT,
            backlog: int = 100,
            inactivity_timeout: float = INACTIVITY_TIMEOUT,
            max_line_length: int = MAX_LINE_LENGTH,
            log_dir: str = ".",
            timeout_graceful_shutdown: float | None = None,
    ):
        if inactivity_timeout <= 0:
            raise ValueError("inactivity_timeout must be positive")
        if max_line_length <= 0:
            raise ValueError("max_line_length must be positive")
        self.host = host
        self.port = port
        self.backlog = backlog
        self.inactivity_timeout = inactivity_timeout
        self.max_line_length = max_line_length
        self.log_dir = log_dir
        self.timeout_graceful_shutdown = timeout_graceful_shutdown
