"""Rule and profile document parsing."""

from .parser import faulted_rule, parse_profile, parse_profiles, parse_rule, parse_rules
from .schema import validate_profile, validate_rule

__all__ = [
    "faulted_rule",
    "parse_profile",
    "parse_profiles",
    "parse_rule",
    "parse_rules",
    "validate_profile",
    "validate_rule",
]
