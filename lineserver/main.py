import os
import click
from .config import Config, DEFAULT_PORT, INACTIVITY_TIMEOUT, MAX_LINE_LENGTH
from .logging_config import LOG_LEVELS, configure_logging
from .server import Server



@click.command()
@click.option("--host", default=None, help="Interface to bind to. All interfaces if omitted.")
@click.option("--port", type=int, default=DEFAULT_PORT, show_default=True, help="Port to listen on")
@click.option("--backlog", type=int, default=100, show_default=True,
              help="Maximum number of pending connections.")
@click.option("--log-dir", type=click.Path(file_okay=False), default=".", show_default=True,
              help="Directory for the per-client message logs.")
@click.option("--timeout", "inactivity_timeout", type=click.FloatRange(min=0, min_open=True),
              default=INACTIVITY_TIMEOUT, show_default=True,
              help="Seconds a client may stay silent before it is disconnected.")
@click.option("--max-line-length", type=click.IntRange(min=1), default=MAX_LINE_LENGTH,
              show_default=True, help="Longest accepted message, in bytes.")
@click.option("--timeout-graceful-shutdown", type=float, default=None,
              help="Seconds to wait for open sessions on shutdown before cancelling them.")
@click.option("--log-level", type=click.Choice(list(LOG_LEVELS.keys())), default="info",
              show_default=True)
@click.option("--use-colors/--no-use-colors", default=None,
              help="Colour log output. Defaults to on when stderr is a terminal.")
def main(host, port, backlog, log_dir, inactivity_timeout, max_line_length,
         timeout_graceful_shutdown, log_level, use_colors):
    """Line-oriented TCP server that answers simple commands and logs every message per client."""
    configure_logging(log_level, use_colors)
    os.makedirs(log_dir, exist_ok=True)
    config = Config(
        host=host,
        port=port,
        backlog=backlog,
        inactivity_timeout=inactivity_timeout,
        max_line_length=max_line_length,
        log_dir=log_dir,
        timeout_graceful_shutdown=timeout_graceful_shutdown,
    )
    Server(config).run()


if __name__ == "__main__":
    main()
