"""Network address helpers."""

from .cidr import any_address_in_ranges, ip_in_cidr, is_ipv4, is_ipv6

__all__ = ["any_address_in_ranges", "ip_in_cidr", "is_ipv4", "is_ipv6"]
