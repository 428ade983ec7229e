"""Config loading and validation for ``autoproxy.yaml``."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import yaml

from autoproxy.config.model import AutoproxyConfig
from autoproxy.constants.config import CONFIG_ALLOWED_TOP_KEYS, CONFIG_FILENAME, CONFIG_SECTION_KEYS
from autoproxy.exceptions import ConfigError
from autoproxy.io import load_yaml_file


def load_config(config_path: Path | None = None, *, root: Path | None = None) -> AutoproxyConfig:
    """Load config from an explicit path, or ``autoproxy.yaml`` under ``root`` (default: cwd).

    A missing default file yields the defaults; a missing explicit file is an error.
    """
    path = config_path if config_path is not None else (root or Path.cwd()) / CONFIG_FILENAME
    if not path.exists():
        if config_path is not None:
            raise ConfigError(f"Config file not found: {path}")
        return AutoproxyConfig()

    try:
        raw = load_yaml_file(path)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML config file at {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file at {path} must be a YAML mapping")
    _reject_unknown(raw, CONFIG_ALLOWED_TOP_KEYS, "")

    timeouts = _section(raw, "timeouts")
    cache = _section(raw, "cache")
    evaluation = _section(raw, "evaluation")
    ip_info = _section(raw, "ip_info")
    captive_portal = _section(raw, "captive_portal")
    log_buffer = _section(raw, "log_buffer")

    defaults = AutoproxyConfig()
    return AutoproxyConfig(
        reachability_timeout=_positive(timeouts, "timeouts.reachability", defaults.reachability_timeout),
        dns_timeout=_positive(timeouts, "timeouts.dns", defaults.dns_timeout),
        ip_info_timeout=_positive(timeouts, "timeouts.ip_info", defaults.ip_info_timeout),
        cache_ttl_seconds=_positive(cache, "cache.ttl_seconds", defaults.cache_ttl_seconds),
        cache_sweep_interval_seconds=_positive(
            cache, "cache.sweep_interval_seconds", defaults.cache_sweep_interval_seconds
        ),
        evaluation_interval_seconds=_positive(
            evaluation, "evaluation.interval_seconds", defaults.evaluation_interval_seconds
        ),
        portal_poll_seconds=_non_negative(evaluation, "evaluation.portal_poll_seconds", defaults.portal_poll_seconds),
        ip_info_url=_url(ip_info, "ip_info.provider_url", defaults.ip_info_url),
        captive_portal_check_url=_url(captive_portal, "captive_portal.check_url", defaults.captive_portal_check_url),
        captive_portal_expect_status=_status(
            captive_portal, "captive_portal.expect_status", defaults.captive_portal_expect_status
        ),
        log_buffer_entries=_positive_int(log_buffer, "log_buffer.entries", defaults.log_buffer_entries),
        log_buffer_max_age_seconds=_positive(
            log_buffer, "log_buffer.max_age_seconds", defaults.log_buffer_max_age_seconds
        ),
    )


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"{name} must be a mapping")
    _reject_unknown(section, CONFIG_SECTION_KEYS[name], f"{name}.")
    return section


def _reject_unknown(mapping: dict[Any, Any], allowed: frozenset[str], prefix: str) -> None:
    for key in sorted(map(str, mapping)):
        if key in allowed:
            continue
        message = f"unknown config key: {prefix}{key}"
        hint = _suggest_key(key, allowed)
        raise ConfigError(f"{message} ({hint})" if hint else message)


def _suggest_key(key: str, allowed: frozenset[str]) -> str:
    matches = difflib.get_close_matches(key, sorted(allowed), n=1, cutoff=0.6)
    return f"did you mean `{matches[0]}`?" if matches else ""


def _number(section: dict[str, Any], key_name: str, default: float) -> float:
    value = section.get(key_name.rsplit(".", 1)[-1], default)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigError(f"{key_name} must be a number, got {value!r}")
    return float(value)


def _positive(section: dict[str, Any], key_name: str, default: float) -> float:
    value = _number(section, key_name, default)
    if value <= 0:
        raise ConfigError(f"{key_name} must be positive, got {value:g}")
    return value


def _non_negative(section: dict[str, Any], key_name: str, default: float) -> float:
    value = _number(section, key_name, default)
    if value < 0:
        raise ConfigError(f"{key_name} must not be negative, got {value:g}")
    return value


def _positive_int(section: dict[str, Any], key_name: str, default: int) -> int:
    value = section.get(key_name.rsplit(".", 1)[-1], default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{key_name} must be a positive integer, got {value!r}")
    return value


def _status(section: dict[str, Any], key_name: str, default: int) -> int:
    value = section.get(key_name.rsplit(".", 1)[-1], default)
    if isinstance(value, bool) or not isinstance(value, int) or not 100 <= value <= 599:
        raise ConfigError(f"{key_name} must be an HTTP status code, got {value!r}")
    return value


def _url(section: dict[str, Any], key_name: str, default: str) -> str:
    value = section.get(key_name.rsplit(".", 1)[-1], default)
    if not isinstance(value, str) or not value.startswith(("http://", "https://")):
        raise ConfigError(f"{key_name} must be an http(s) URL, got {value!r}")
    return value
