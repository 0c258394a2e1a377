"""Persisted interface selection (network-config.json)."""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

from wolgate.core.interfaces import InterfaceRecord


def _slot(record: Optional[InterfaceRecord]) -> Optional[dict[str, str]]:
    if record is None:
        return None
    return {"name": record.name, "address": record.address}


def build_snapshot(
    local: Optional[InterfaceRecord],
    docker: Optional[InterfaceRecord],
    interfaces: Sequence[InterfaceRecord],
) -> dict[str, Any]:
    """Build the snapshot dict for the current selection."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "local": _slot(local),
        "docker": _slot(docker),
        "all": [
            {
                "name": i.name,
                "address": i.address,
                "isDocker": i.is_docker,
                "isLocal": i.is_local,
            }
            for i in interfaces
        ],
    }


def write_snapshot(path: Path, snapshot: dict[str, Any]) -> None:
    """
    Atomically write a snapshot to a JSON file.

    Uses a temp-file + os.replace so a crash mid-write never leaves a
    half-written file.

    Args:
        path: Destination JSON path.
        snapshot: Dict produced by build_snapshot().
    """
    tmp = path.with_suffix(".json.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2)
        os.replace(tmp, path)
    except Exception:
        if tmp.exists():
            tmp.unlink(missing_ok=True)
        raise


def load_snapshot(path: Path) -> Optional[dict[str, Any]]:
    """
    Load a previously written snapshot.

    Returns:
        The snapshot dict, or None if the file does not exist

    Raises:
        ValueError: If the file is not a JSON object (json.JSONDecodeError included)
    """
    if not path.exists():
        return None
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Snapshot root must be an object: {path}")
    return data


def saved_name(snapshot: dict[str, Any], kind: str) -> Optional[str]:
    """Name stored for ``kind`` ("local" / "docker"), if any."""
    entry = snapshot.get(kind)
    if isinstance(entry, dict) and isinstance(entry.get("name"), str):
        return entry["name"]
    return None
