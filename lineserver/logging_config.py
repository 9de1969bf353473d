import logging
import sys
import click

LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

LEVEL_COLORS = {
    logging.DEBUG: "cyan",
    logging.INFO: "green",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bright_red",
}


class ColourizedFormatter(logging.Formatter):
    """
    Colours the level name and, when a record carries a "color_message" extra, uses that
    instead of the plain message.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = use_colors

    def formatMessage(self, record: logging.LogRecord) -> str:
        if self.use_colors:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = click.style(record.levelname, fg=LEVEL_COLORS.get(record.levelno))
            color_message = getattr(record, "color_message", None)
            if color_message:
                record.message = color_message % record.args if record.args else color_message
        return super().formatMessage(record)


def configure_logging(level: str = "info", use_colors: bool | None = None) -> None:
    if use_colors is None:
        use_colors = sys.stderr.isatty()
    handler = logging.StreamHandler()
    handler.setFormatter(ColourizedFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        use_colors=use_colors,
    ))
    logging.basicConfig(level=LOG_LEVELS[level], handlers=[handler], force=True)
