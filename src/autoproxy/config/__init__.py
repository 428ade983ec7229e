"""Engine configuration loading."""

from __future__ import annotations

from autoproxy.config.loader import load_config
from autoproxy.config.model import AutoproxyConfig

__all__ = ["AutoproxyConfig", "load_config"]
