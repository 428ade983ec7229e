"""IPv4/IPv6 address validation and CIDR containment.

Every function fails closed: malformed input yields ``False``, never an
exception. IPv6 containment is exact at the bit level.
"""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


def is_ipv4(value: str) -> bool:
    """Return True for a dotted-quad IPv4 address without leading zeros."""
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def is_ipv6(value: str) -> bool:
    """Return True for a colon-hex IPv6 address."""
    try:
        ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


def ip_in_cidr(ip: str, cidr: str) -> bool:
    """Return True when ``ip`` lies inside ``cidr``; host bits in ``cidr`` are ignored."""
    if not isinstance(ip, str) or not isinstance(cidr, str):
        return False

    parts = cidr.strip().split("/")
    if len(parts) != 2:
        return False
    network_text, prefix_text = parts
    if not prefix_text.isdigit():
        return False

    try:
        address = ipaddress.ip_address(ip.strip())
        network = ipaddress.ip_network(f"{network_text}/{int(prefix_text)}", strict=False)
    except ValueError:
        return False

    if address.version != network.version:
        return False
    return address in network


def any_address_in_ranges(addresses: Iterable[str], cidrs: Iterable[str]) -> bool:
    """Return True when at least one address falls in at least one range."""
    ranges = list(cidrs)
    for address in addresses:
        for cidr in ranges:
            if ip_in_cidr(address, cidr):
                logger.debug("Address %s matched range %s", address, cidr)
                return True
    return False
