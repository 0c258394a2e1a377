"""Wake-on-LAN magic packets, sent through a selected interface."""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from wakeonlan import create_magic_packet, send_magic_packet

from wolgate.core.interfaces import InterfaceRecord

logger = logging.getLogger(__name__)

DEFAULT_PORT = 9

_SEPARATORS_RE = re.compile(r"[:-]")
_HEX12_RE = re.compile(r"[0-9a-f]{12}")


class InvalidMacAddress(ValueError):
    """Raised for a MAC address that is not 6 hex-encoded bytes."""


class WakeError(Exception):
    """Base class for failures to send a wake packet."""


class InterfaceNotConfigured(WakeError):
    """Raised when no interface is available to send from."""


class SendError(WakeError):
    """Raised when the socket could not be bound or the packet not sent."""


def normalize_mac(mac_address: str) -> str:
    """
    Strip ``:``/``-`` separators and lower-case a MAC address.

    Raises:
        InvalidMacAddress: If 12 hex digits do not remain
    """
    mac = _SEPARATORS_RE.sub("", mac_address).lower()
    if not _HEX12_RE.fullmatch(mac):
        raise InvalidMacAddress(f"Invalid MAC address: {mac_address}")
    return mac


def build_magic_packet(mac_address: str) -> bytes:
    """
    Build the 102-byte magic packet for a MAC address.

    Args:
        mac_address: "AA:BB:CC:DD:EE:FF", "aa-bb-cc-dd-ee-ff" or "AABBCCDDEEFF"

    Returns:
        6 bytes of 0xFF followed by the MAC repeated 16 times
    """
    return create_magic_packet(normalize_mac(mac_address))


def wake(mac_address: str, iface: Optional[InterfaceRecord], port: int = DEFAULT_PORT) -> str:
    """
    Broadcast a magic packet on one interface.

    The socket is bound to the interface address so the packet leaves through
    that interface rather than the default route.

    Args:
        mac_address: MAC address of the target machine
        iface: Interface to send from
        port: UDP port for WOL packet (default: 9)

    Returns:
        Name of the interface the packet was sent on

    Raises:
        InterfaceNotConfigured: If iface is None
        InvalidMacAddress: If the MAC address is malformed
        SendError: On bind, permission or transmission errors
    """
    if iface is None:
        raise InterfaceNotConfigured("Interface not configured")

    mac = normalize_mac(mac_address)
    logger.info(
        "Sending WOL to %s on %s (source %s, broadcast %s:%d)",
        mac_address,
        iface.name,
        iface.address,
        iface.broadcast,
        port,
    )
    try:
        send_magic_packet(mac, ip_address=iface.broadcast, port=port, interface=iface.address)
    except OSError as exc:
        logger.error("WOL send failed on %s: %s", iface.name, exc)
        raise SendError(str(exc)) from exc
    logger.debug("WOL packet sent successfully on %s", iface.name)
    return iface.name


@dataclass
class WakeOutcome:
    """Per-interface result of a wake attempt."""

    success: bool
    interface: str
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"success": self.success, "interface": self.interface}
        if self.error is not None:
            d["error"] = self.error
        return d


async def _wake_one(
    mac_address: str, iface: Optional[InterfaceRecord], kind: str, port: int
) -> WakeOutcome:
    if iface is None:
        return WakeOutcome(False, "not configured", f"{kind.capitalize()} interface not configured")
    try:
        await asyncio.to_thread(wake, mac_address, iface, port)
    except (WakeError, InvalidMacAddress) as exc:
        return WakeOutcome(False, iface.name, str(exc))
    return WakeOutcome(True, iface.name)


async def wake_all(
    mac_address: str,
    local: Optional[InterfaceRecord],
    docker: Optional[InterfaceRecord],
    port: int = DEFAULT_PORT,
) -> dict[str, WakeOutcome]:
    """
    Send on the local and Docker interfaces concurrently.

    Both sends always run to completion; one failing never hides the other.

    Returns:
        {"local": WakeOutcome, "docker": WakeOutcome}
    """
    local_result, docker_result = await asyncio.gather(
        _wake_one(mac_address, local, "local", port),
        _wake_one(mac_address, docker, "docker", port),
    )
    return {"local": local_result, "docker": docker_result}
