"""Tests for the persisted interface selection."""

import json
from pathlib import Path

import pytest

from wolgate.config.snapshot import build_snapshot, load_snapshot, saved_name, write_snapshot
from wolgate.core.interfaces import InterfaceRecord

ETH0 = InterfaceRecord("eth0", "192.168.1.20", "255.255.255.0", "192.168.1.255", is_local=True)
DOCKER0 = InterfaceRecord("docker0", "172.17.0.1", "255.255.0.0", "172.17.255.255", is_docker=True)


class TestBuildSnapshot:
    def test_full_selection(self) -> None:
        snap = build_snapshot(ETH0, DOCKER0, [ETH0, DOCKER0])
        assert snap["local"] == {"name": "eth0", "address": "192.168.1.20"}
        assert snap["docker"] == {"name": "docker0", "address": "172.17.0.1"}
        assert snap["all"][1] == {
            "name": "docker0",
            "address": "172.17.0.1",
            "isDocker": True,
            "isLocal": False,
        }
        assert snap["timestamp"].endswith("+00:00")

    def test_unset_slots_are_null(self) -> None:
        snap = build_snapshot(None, None, [])
        assert snap["local"] is None
        assert snap["docker"] is None
        assert snap["all"] == []


class TestWriteSnapshot:
    def test_write_and_reload(self, tmp_path: Path) -> None:
        path = tmp_path / "network-config.json"
        snap = build_snapshot(ETH0, None, [ETH0])
        write_snapshot(path, snap)
        assert load_snapshot(path) == snap

    def test_creates_parent_dirs(self, tmp_path: Path) -> None:
        path = tmp_path / "state" / "nested" / "network-config.json"
        write_snapshot(path, build_snapshot(None, None, []))
        assert path.exists()

    def test_overwrites_and_leaves_no_temp_file(self, tmp_path: Path) -> None:
        path = tmp_path / "network-config.json"
        write_snapshot(path, build_snapshot(ETH0, None, [ETH0]))
        write_snapshot(path, build_snapshot(None, DOCKER0, [DOCKER0]))
        assert json.loads(path.read_text())["docker"]["name"] == "docker0"
        assert not path.with_suffix(".json.tmp").exists()


class TestLoadSnapshot:
    def test_missing_file_returns_none(self, tmp_path: Path) -> None:
        assert load_snapshot(tmp_path / "nope.json") is None

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{")
        with pytest.raises(ValueError):
            load_snapshot(path)

    def test_non_object_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(ValueError):
            load_snapshot(path)


class TestSavedName:
    def test_present(self) -> None:
        assert saved_name({"local": {"name": "eth0", "address": "x"}}, "local") == "eth0"

    @pytest.mark.parametrize("snap", [{}, {"local": None}, {"local": "eth0"}, {"local": {}}])
    def test_absent_or_malformed(self, snap: dict) -> None:
        assert saved_name(snap, "local") is None
