"""IPv4 broadcast address calculation."""


class InvalidAddress(ValueError):
    """Raised when an IPv4 address or netmask is not a dotted quad."""


def _octets(value: str) -> list[int]:
    parts = value.split(".") if isinstance(value, str) else []
    if len(parts) != 4:
        raise InvalidAddress(f"Invalid IPv4 address: {value!r}")
    octets = []
    for part in parts:
        if not (part.isascii() and part.isdigit()):
            raise InvalidAddress(f"Invalid IPv4 address: {value!r}")
        octet = int(part)
        if octet > 255:
            raise InvalidAddress(f"Octet out of range in {value!r}")
        octets.append(octet)
    return octets


def broadcast(address: str, netmask: str) -> str:
    """
    Compute the broadcast address of the subnet an address belongs to.

    Args:
        address: IPv4 address (e.g. "192.168.1.42")
        netmask: Subnet mask (e.g. "255.255.255.0")

    Returns:
        Broadcast address (e.g. "192.168.1.255")

    Raises:
        InvalidAddress: If either argument is not a valid dotted quad
    """
    return ".".join(
        str(a | (~m & 255)) for a, m in zip(_octets(address), _octets(netmask))
    )
