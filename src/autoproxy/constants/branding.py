"""CLI branding strings."""

from __future__ import annotations

CLI_DESCRIPTION: str = (
    "autoproxy - select a proxy profile by evaluating prioritized network rules.\n"
    "Rules combine reachability, DNS, captive-portal, IP info, time-window and manual-flag triggers."
)
