"""
Per-client message log.

Every message a client sends is appended to client_<address>.log, where <address> is the client
identity with ':' and '.' replaced by '_'. Files are only ever opened in append mode, so a client
that reconnects from the same address keeps adding to the same history.

Logging is best-effort: if the file can't be opened the session gets a NullSessionLog and carries
on without persistence, and a failed write is reported through the operational logger only.
"""
import logging
import os
from datetime import datetime
from typing import TextIO

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = str.maketrans({":": "_", ".": "_"})


def log_filename(identity: str) -> str:
    return "client_{}.log".format(identity.translate(_UNSAFE_CHARS))


class SessionLog:
    """Interface shared by the file-backed log and the no-op fallback."""

    def append(self, timestamp: datetime, message: str) -> None:
        raise NotImplementedError()

    def close(self) -> None:
        raise NotImplementedError()


class NullSessionLog(SessionLog):

    def append(self, timestamp: datetime, message: str) -> None:
        return None

    def close(self) -> None:
        return None


class FileSessionLog(SessionLog):

    def __init__(self, path: str, file: TextIO):
        self.path = path
        self._file: TextIO | None = file

    @classmethod
    def open(cls, path: str) -> "FileSessionLog":
        return cls(path, open(path, "a", encoding="utf-8"))

    @property
    def closed(self) -> bool:
        return self._file is None

    def append(self, timestamp: datetime, message: str) -> None:
        if self._file is None:
            return
        try:
            self._file.write(f"{timestamp.isoformat(timespec='seconds')}: {message}\n")
            self._file.flush()
        except OSError as exc:
            logger.warning("Failed to write to log file %s: %s", self.path, exc)

    def close(self) -> None:
        if self._file is None:
            return
        file, self._file = self._file, None
        try:
            file.close()
        except OSError as exc:
            logger.warning("Failed to close log file %s: %s", self.path, exc)


def open_session_log(identity: str, log_dir: str = ".") -> SessionLog:
    path = os.path.join(log_dir, log_filename(identity))
    try:
        return FileSessionLog.open(path)
    except OSError as exc:
        logger.warning("Failed to create log file for %s: %s", identity, exc)
        return NullSessionLog()
