"""Enumeration of the host's IPv4 network interfaces (psutil)."""

import ipaddress
import logging
import socket
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import psutil

from wolgate.core.classify import classify
from wolgate.core.netaddr import InvalidAddress, broadcast

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE = frozenset({"lo"})
NO_MAC = "N/A"


@dataclass(frozen=True)
class InterfaceRecord:
    """One network interface with a usable IPv4 address."""

    name: str
    address: str
    netmask: str
    broadcast: str
    mac: str = NO_MAC
    is_docker: bool = False
    is_local: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "netmask": self.netmask,
            "broadcast": self.broadcast,
            "mac": self.mac,
            "isDocker": self.is_docker,
            "isLocal": self.is_local,
        }

    def summary(self) -> dict[str, str]:
        """Short form used by the health endpoint and the startup banner."""
        return {"name": self.name, "ip": self.address, "broadcast": self.broadcast}


def _is_internal(address: str) -> bool:
    try:
        return ipaddress.ip_address(address).is_loopback
    except ValueError:
        return False


def enumerate_interfaces(
    exclude: Iterable[str] = DEFAULT_EXCLUDE,
    local_prefix: Optional[str] = None,
) -> list[InterfaceRecord]:
    """
    List the host's interfaces that carry a non-internal IPv4 address.

    Interfaces named in ``exclude`` and interfaces without such an address are
    skipped silently. When an interface has several IPv4 addresses, the first
    one wins. An interface whose address or netmask cannot be parsed is skipped
    with a warning instead of failing the whole enumeration.

    Args:
        exclude: Interface names to ignore (default: {"lo"})
        local_prefix: Address prefix hint passed to the classifier

    Returns:
        InterfaceRecord list in OS enumeration order
    """
    excluded = set(exclude)
    records: list[InterfaceRecord] = []

    for name, addrs in psutil.net_if_addrs().items():
        if name in excluded:
            continue

        ipv4 = next(
            (a for a in addrs if a.family == socket.AF_INET and not _is_internal(a.address)),
            None,
        )
        if ipv4 is None:
            continue

        mac = next((a.address for a in addrs if a.family == psutil.AF_LINK and a.address), NO_MAC)
        try:
            bcast = broadcast(ipv4.address, ipv4.netmask or "")
        except InvalidAddress as exc:
            logger.warning("Skipping interface %s: %s", name, exc)
            continue

        tags = classify(name, ipv4.address, local_prefix)
        record = InterfaceRecord(
            name=name,
            address=ipv4.address,
            netmask=ipv4.netmask,
            broadcast=bcast,
            mac=mac,
            is_docker=tags.is_docker,
            is_local=tags.is_local,
        )
        logger.debug(
            "  - %s: %s (docker=%s, local=%s)",
            record.name,
            record.address,
            record.is_docker,
            record.is_local,
        )
        records.append(record)

    return records
