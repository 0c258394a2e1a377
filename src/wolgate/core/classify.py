"""Name-based classification of network interfaces."""

import re
from typing import NamedTuple, Optional

# Container networking: the default bridge, user-defined bridges, veth pairs.
DOCKER_PATTERNS = (
    re.compile(r"docker\d+"),
    re.compile(r"br-[a-f0-9]{12}"),
    re.compile(r"veth[a-f0-9]+"),
)

# Typical names of physical adapters (legacy and predictable naming).
LOCAL_PATTERNS = (
    re.compile(r"eth\d+"),
    re.compile(r"ens\d+"),
    re.compile(r"enp\d+s\d+"),
    re.compile(r"eno\d+"),
    re.compile(r"wlan\d+"),
    re.compile(r"wlp\d+s\d+"),
)

# Inside a container the primary interface is always eth0.
PRIMARY_INTERFACE = "eth0"


class Classification(NamedTuple):
    is_docker: bool
    is_local: bool


def is_docker_interface(name: str) -> bool:
    return any(p.fullmatch(name) for p in DOCKER_PATTERNS)


def is_local_interface(name: str, address: str, local_prefix: Optional[str] = None) -> bool:
    """
    Decide whether an interface faces the host's physical network.

    Checked in order: the primary container interface, the configured
    address prefix, then the physical adapter name patterns.
    """
    if name == PRIMARY_INTERFACE:
        return True
    if local_prefix and address.startswith(local_prefix):
        return True
    return any(p.fullmatch(name) for p in LOCAL_PATTERNS)


def classify(name: str, address: str, local_prefix: Optional[str] = None) -> Classification:
    """
    Tag an interface as Docker and/or local.

    Args:
        name: Interface name as reported by the OS
        address: Its IPv4 address
        local_prefix: Optional address prefix of the local network (e.g. "192.168")

    Returns:
        Classification with independent is_docker / is_local flags
    """
    return Classification(
        is_docker=is_docker_interface(name),
        is_local=is_local_interface(name, address, local_prefix),
    )
