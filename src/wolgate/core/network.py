"""Selection of the local and Docker interfaces used for Wake-on-LAN."""

import logging
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from wolgate.config.loader import Settings
from wolgate.config.snapshot import build_snapshot, load_snapshot, saved_name, write_snapshot
from wolgate.core.interfaces import InterfaceRecord, enumerate_interfaces

logger = logging.getLogger(__name__)

KINDS = ("local", "docker")


class InterfaceNotFound(LookupError):
    """Raised when no current interface has the requested name."""


@dataclass(frozen=True)
class Selection:
    """An immutable view of the selected interfaces."""

    local: Optional[InterfaceRecord] = None
    docker: Optional[InterfaceRecord] = None
    interfaces: tuple[InterfaceRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "local": self.local.to_dict() if self.local else None,
            "docker": self.docker.to_dict() if self.docker else None,
            "all": [i.to_dict() for i in self.interfaces],
        }


def pick_local(interfaces: Sequence[InterfaceRecord]) -> Optional[InterfaceRecord]:
    """First eth* candidate, else first ens*, else the first local candidate."""
    candidates = [i for i in interfaces if i.is_local and not i.is_docker]
    for prefix in ("eth", "ens"):
        match = next((i for i in candidates if i.name.startswith(prefix)), None)
        if match is not None:
            return match
    return candidates[0] if candidates else None


def pick_docker(interfaces: Sequence[InterfaceRecord]) -> Optional[InterfaceRecord]:
    """docker0 if present, else the first Docker candidate."""
    candidates = [i for i in interfaces if i.is_docker]
    match = next((i for i in candidates if i.name == "docker0"), None)
    if match is not None:
        return match
    return candidates[0] if candidates else None


class NetworkConfig:
    """
    Process-wide network configuration.

    Construct with :meth:`initialize`. Readers use :attr:`selection` (or the
    convenience properties) and always see a consistent local/docker pair;
    :meth:`detect` is the only writer after startup and is serialized by a lock.
    """

    def __init__(
        self,
        settings: Settings,
        enumerate_fn: Optional[Callable[[], list[InterfaceRecord]]] = None,
    ) -> None:
        self.settings = settings
        self.state_file = Path(settings.state_file)
        self._enumerate_fn = enumerate_fn or self._enumerate
        self._selection = Selection()
        self._lock = threading.Lock()

    # ── Read side ─────────────────────────────────────────────────────────────

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def local_interface(self) -> Optional[InterfaceRecord]:
        return self._selection.local

    @property
    def docker_interface(self) -> Optional[InterfaceRecord]:
        return self._selection.docker

    @property
    def all_interfaces(self) -> tuple[InterfaceRecord, ...]:
        return self._selection.interfaces

    def get_interface(self, kind: str) -> Optional[InterfaceRecord]:
        """Selected interface for "local" or "docker"; None for anything else."""
        selection = self._selection
        if kind == "local":
            return selection.local
        if kind == "docker":
            return selection.docker
        return None

    def resolve(self, name: str) -> InterfaceRecord:
        """
        Find a current interface by exact name.

        Raises:
            InterfaceNotFound: If no interface has that name
        """
        for iface in self._selection.interfaces:
            if iface.name == name:
                return iface
        raise InterfaceNotFound(f"Interface {name} not found")

    def lookup(self, target: Optional[str]) -> Optional[InterfaceRecord]:
        """
        Resolve a wake target: "local", "docker" or an interface name.

        None defaults to the local interface. Unknown names return None.
        """
        if not target:
            return self.local_interface
        if target in KINDS:
            return self.get_interface(target)
        try:
            return self.resolve(target)
        except InterfaceNotFound:
            return None

    # ── Write side ────────────────────────────────────────────────────────────

    def _enumerate(self) -> list[InterfaceRecord]:
        return enumerate_interfaces(
            exclude=self.settings.exclude_interfaces,
            local_prefix=self.settings.local_network_prefix,
        )

    def _refresh(self) -> None:
        self._selection = replace(self._selection, interfaces=tuple(self._enumerate_fn()))
        logger.info("%d interface(s) detected", len(self._selection.interfaces))

    def _resolve_into(self, kind: str, name: str) -> None:
        try:
            iface = self.resolve(name)
        except InterfaceNotFound as exc:
            logger.error("Cannot use %s interface: %s", kind, exc)
            return
        self._selection = replace(self._selection, **{kind: iface})
        logger.info("%s interface configured: %s (%s)", kind.capitalize(), iface.name, iface.address)

    def _manual_slots(self, interfaces: Sequence[InterfaceRecord]) -> dict[str, InterfaceRecord]:
        """Manually configured interfaces that exist in ``interfaces``."""
        names = {"local": self.settings.local_interface, "docker": self.settings.docker_interface}
        pinned: dict[str, InterfaceRecord] = {}
        for kind, name in names.items():
            if not name:
                continue
            match = next((i for i in interfaces if i.name == name), None)
            if match is None:
                logger.error("Cannot use %s interface: Interface %s not found", kind, name)
            else:
                pinned[kind] = match
        return pinned

    def _auto_detect(
        self, interfaces: Sequence[InterfaceRecord], pinned: dict[str, InterfaceRecord]
    ) -> Selection:
        logger.info("%d interface(s) detected", len(interfaces))

        local = pinned.get("local") or pick_local(interfaces)
        docker = pinned.get("docker") or pick_docker(interfaces)

        if local:
            logger.info("Local interface detected: %s (%s)", local.name, local.address)
        else:
            logger.warning("No local interface detected")
        if docker:
            logger.info("Docker interface detected: %s (%s)", docker.name, docker.address)
        else:
            logger.warning("No Docker interface detected")

        self._selection = Selection(local=local, docker=docker, interfaces=tuple(interfaces))
        self.save()
        return self._selection

    def detect(self) -> Selection:
        """
        Re-run auto-detection from a fresh interface list and persist the result.

        Manually configured interfaces are re-resolved against the fresh list
        and kept; the other slots are picked again.
        """
        with self._lock:
            logger.info("Starting interface auto-detection")
            interfaces = tuple(self._enumerate_fn())
            return self._auto_detect(interfaces, self._manual_slots(interfaces))

    def save(self) -> None:
        """Persist the current selection; failures are logged, not raised."""
        selection = self._selection
        snapshot = build_snapshot(selection.local, selection.docker, selection.interfaces)
        try:
            write_snapshot(self.state_file, snapshot)
        except OSError as exc:
            logger.error("Failed to save network configuration to %s: %s", self.state_file, exc)
            return
        logger.info("Network configuration saved to %s", self.state_file)

    def load(self) -> bool:
        """
        Fill unset slots from the persisted snapshot.

        Saved names that no longer resolve leave their slot unset.

        Returns:
            True if a snapshot was read
        """
        try:
            snapshot = load_snapshot(self.state_file)
        except (OSError, ValueError) as exc:
            logger.error("Failed to load network configuration from %s: %s", self.state_file, exc)
            return False
        if snapshot is None:
            return False

        logger.info("Network configuration loaded from %s", self.state_file)
        for kind in KINDS:
            name = saved_name(snapshot, kind)
            if name and self.get_interface(kind) is None:
                self._resolve_into(kind, name)
        return True

    def _incomplete(self) -> bool:
        return self.local_interface is None or self.docker_interface is None

    @classmethod
    def initialize(
        cls,
        settings: Settings,
        enumerate_fn: Optional[Callable[[], list[InterfaceRecord]]] = None,
    ) -> "NetworkConfig":
        """
        Build the configuration for this process.

        Workflow:
            1. Resolve manually configured interface names
            2. Auto-detect unset slots (if enabled)
            3. Fill remaining slots from the persisted snapshot

        Args:
            settings: Loaded settings
            enumerate_fn: Interface source (default: the host's interfaces)

        Returns:
            Initialized NetworkConfig
        """
        config = cls(settings, enumerate_fn=enumerate_fn)
        enumerated = False

        with config._lock:
            if settings.local_interface or settings.docker_interface:
                logger.info("Manual interface configuration detected")
                config._refresh()
                enumerated = True
                if settings.local_interface:
                    config._resolve_into("local", settings.local_interface)
                if settings.docker_interface:
                    config._resolve_into("docker", settings.docker_interface)

            if settings.auto_detect and config._incomplete():
                logger.info("Starting interface auto-detection")
                current = config.selection
                pinned = {k: getattr(current, k) for k in KINDS if getattr(current, k) is not None}
                config._auto_detect(tuple(config._enumerate_fn()), pinned)
                enumerated = True

            if config._incomplete():
                if not enumerated:
                    config._refresh()
                config.load()

        return config
