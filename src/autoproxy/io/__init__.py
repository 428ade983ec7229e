"""Filesystem helpers."""

from .files import load_json_file, load_yaml_file, write_json_atomic, write_yaml

__all__ = ["load_json_file", "load_yaml_file", "write_json_atomic", "write_yaml"]
