"""Seed profiles and example rules for a freshly created store."""

from __future__ import annotations

from typing import Any

DEFAULT_PROFILES: dict[str, dict[str, Any]] = {
    "direct": {"id": "direct", "name": "Direct Connection", "mode": "direct"},
    "system": {"id": "system", "name": "System Proxy", "mode": "system"},
    "work-proxy": {
        "id": "work-proxy",
        "name": "Work Proxy (Example)",
        "mode": "manual",
        "manual": {
            "http": {"host": "proxy.company.com", "port": 8080},
            "https": {"host": "proxy.company.com", "port": 8080},
            "bypassList": ["localhost", "127.0.0.1", "*.local"],
        },
    },
}

DEFAULT_RULES: dict[str, dict[str, Any]] = {
    "work-hours": {
        "id": "work-hours",
        "name": "Work Hours (Example)",
        "enabled": False,
        "priority": 100,
        "stopOnMatch": True,
        "when": {"timeWindow": {"days": [1, 2, 3, 4, 5], "from": "09:00", "to": "17:00"}},
        "then": {"setActiveProfile": "work-proxy"},
    },
    "corporate-network": {
        "id": "corporate-network",
        "name": "Corporate Network (Example)",
        "enabled": False,
        "priority": 50,
        "stopOnMatch": True,
        "when": {"dnsResolve": {"hostname": "intranet.company.com", "matches": "exact"}},
        "then": {"setActiveProfile": "work-proxy"},
    },
    "home-network": {
        "id": "home-network",
        "name": "Home Network (Example)",
        "enabled": False,
        "priority": 200,
        "stopOnMatch": True,
        "when": {"ipInfo": {"expectOrg": "Home ISP Provider"}},
        "then": {"setActiveProfile": "direct"},
    },
}
