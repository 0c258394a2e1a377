"""Tests for the wolgate CLI."""

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from wolgate.cli import main
from wolgate.config.loader import ENV_KEYS, Settings
from wolgate.core.interfaces import InterfaceRecord
from wolgate.core.network import NetworkConfig

ETH0 = InterfaceRecord("eth0", "192.168.1.20", "255.255.255.0", "192.168.1.255", is_local=True)
DOCKER0 = InterfaceRecord("docker0", "172.17.0.1", "255.255.0.0", "172.17.255.255", is_docker=True)


# ── Helpers ───────────────────────────────────────────────────────────────────


@pytest.fixture()
def env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the snapshot at tmp_path and isolate from the caller's environment."""
    for var in ENV_KEYS:
        monkeypatch.delenv(var, raising=False)
    state = tmp_path / "network-config.json"
    monkeypatch.setenv("NETWORK_CONFIG_PATH", str(state))
    return state


def _invoke(*args: str) -> Any:
    return CliRunner().invoke(main, ["--config", "/nonexistent/wolgate.yaml", *args])


def _fake_init(interfaces: list[InterfaceRecord]):
    def _init(settings: Settings) -> NetworkConfig:
        return NetworkConfig.initialize(settings, enumerate_fn=lambda: list(interfaces))

    return _init


class TestConfigErrors:
    def test_invalid_env_exits_1(self, env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WOL_PORT", "abc")
        result = _invoke("interfaces")
        assert result.exit_code == 1
        assert "Config error" in result.output

    def test_invalid_yaml_exits_1(self, env: Path, tmp_path: Path) -> None:
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("invalid: yaml: content: [")
        result = CliRunner().invoke(main, ["--config", str(cfg), "interfaces"])
        assert result.exit_code == 1


class TestInterfacesCommand:
    @patch("wolgate.core.interfaces.enumerate_interfaces", return_value=[ETH0, DOCKER0])
    def test_prints_table(self, mock_enum: MagicMock, env: Path) -> None:
        result = _invoke("interfaces")
        assert result.exit_code == 0
        assert "eth0" in result.output
        assert "172.17.255.255" in result.output
        mock_enum.assert_called_once_with(exclude=["lo"], local_prefix=None)

    @patch("wolgate.core.interfaces.enumerate_interfaces", return_value=[])
    def test_no_interfaces(self, mock_enum: MagicMock, env: Path) -> None:
        result = _invoke("interfaces")
        assert result.exit_code == 0
        assert "No IPv4 interfaces" in result.output


class TestDetectCommand:
    @patch("wolgate.core.network.enumerate_interfaces", return_value=[ETH0, DOCKER0])
    def test_detect_saves_selection(self, mock_enum: MagicMock, env: Path) -> None:
        result = _invoke("detect")
        assert result.exit_code == 0
        assert "eth0" in result.output
        assert "docker0" in result.output
        assert json.loads(env.read_text())["local"]["name"] == "eth0"


class TestWakeCommand:
    @patch("wolgate.core.wol.send_magic_packet")
    def test_wake_local(self, mock_send: MagicMock, env: Path) -> None:
        with patch("wolgate.cli._init_network", _fake_init([ETH0, DOCKER0])):
            result = _invoke("wake", "AA:BB:CC:DD:EE:FF")
        assert result.exit_code == 0
        assert "via eth0" in result.output
        mock_send.assert_called_once()

    @patch("wolgate.core.wol.send_magic_packet")
    def test_wake_named_interface(self, mock_send: MagicMock, env: Path) -> None:
        with patch("wolgate.cli._init_network", _fake_init([ETH0, DOCKER0])):
            result = _invoke("wake", "AA:BB:CC:DD:EE:FF", "--interface", "docker0")
        assert result.exit_code == 0
        assert mock_send.call_args.kwargs["interface"] == "172.17.0.1"

    def test_wake_unknown_interface_exits_1(self, env: Path) -> None:
        with patch("wolgate.cli._init_network", _fake_init([ETH0])):
            result = _invoke("wake", "AA:BB:CC:DD:EE:FF", "-i", "eth7")
        assert result.exit_code == 1

    def test_wake_invalid_mac_exits_1(self, env: Path) -> None:
        with patch("wolgate.cli._init_network", _fake_init([ETH0])):
            result = _invoke("wake", "AA:BB")
        assert result.exit_code == 1

    @patch("wolgate.core.wol.send_magic_packet", side_effect=OSError("Permission denied"))
    def test_wake_send_failure_exits_2(self, mock_send: MagicMock, env: Path) -> None:
        with patch("wolgate.cli._init_network", _fake_init([ETH0])):
            result = _invoke("wake", "AA:BB:CC:DD:EE:FF")
        assert result.exit_code == 2

    @patch("wolgate.core.wol.send_magic_packet")
    def test_wake_all_partial_success(self, mock_send: MagicMock, env: Path) -> None:
        with patch("wolgate.cli._init_network", _fake_init([ETH0])):
            result = _invoke("wake", "AA:BB:CC:DD:EE:FF", "--all")
        assert result.exit_code == 0
        assert "not configured" in result.output

    def test_wake_all_nothing_configured_exits_2(self, env: Path) -> None:
        with patch("wolgate.cli._init_network", _fake_init([])):
            result = _invoke("wake", "AA:BB:CC:DD:EE:FF", "--all")
        assert result.exit_code == 2


class TestKeygen:
    def test_prints_key(self) -> None:
        result = CliRunner().invoke(main, ["keygen"])
        assert result.exit_code == 0
        assert len(result.output.strip()) == 64


class TestServe:
    @patch("uvicorn.run")
    def test_serve_starts_uvicorn(self, mock_run: MagicMock, env: Path) -> None:
        with patch("wolgate.cli._init_network", _fake_init([ETH0])):
            result = _invoke("serve", "--port", "3123")
        assert result.exit_code == 0
        assert "NOT CONFIGURED" in result.output
        assert "eth0" in result.output
        _, kwargs = mock_run.call_args
        assert kwargs["port"] == 3123
        assert kwargs["host"] == "0.0.0.0"
