"""
Tests for the command line entry point.
"""

import pytest
from click.testing import CliRunner

from lineserver import main as main_module


class RecordingServer:
    instances: list["RecordingServer"] = []

    def __init__(self, config):
        self.config = config
        self.ran = False
        RecordingServer.instances.append(self)

    def run(self):
        self.ran = True


@pytest.fixture
def recording_server(monkeypatch):
    RecordingServer.instances = []
    monkeypatch.setattr(main_module, "Server", RecordingServer)
    monkeypatch.setattr(main_module, "configure_logging", lambda *args, **kwargs: None)
    return RecordingServer


def test_help_shows_default_port():
    result = CliRunner().invoke(main_module.main, ["--help"])
    assert result.exit_code == 0
    assert "--port" in result.output
    assert "4000" in result.output


def test_defaults(recording_server, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(main_module.main, [])
    assert result.exit_code == 0, result.output

    (server,) = recording_server.instances
    assert server.ran
    assert server.config.port == 4000
    assert server.config.host is None
    assert server.config.inactivity_timeout == 30.0
    assert server.config.max_line_length == 1024
    assert server.config.log_dir == "."


def test_options_reach_config(recording_server, tmp_path):
    log_dir = tmp_path / "logs"
    result = CliRunner().invoke(main_module.main, [
        "--host", "127.0.0.1",
        "--port", "5050",
        "--log-dir", str(log_dir),
        "--timeout", "2.5",
        "--max-line-length", "256",
        "--timeout-graceful-shutdown", "3",
    ])
    assert result.exit_code == 0, result.output

    config = recording_server.instances[0].config
    assert (config.host, config.port) == ("127.0.0.1", 5050)
    assert config.inactivity_timeout == 2.5
    assert config.max_line_length == 256
    assert config.timeout_graceful_shutdown == 3.0
    assert log_dir.is_dir()


@pytest.mark.parametrize("args", [["--timeout", "0"], ["--max-line-length", "0"], ["--port", "abc"]])
def test_invalid_options_rejected(recording_server, args):
    result = CliRunner().invoke(main_module.main, args)
    assert result.exit_code == 2
    assert recording_server.instances == []
