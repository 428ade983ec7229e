"""Rule, profile and state storage plus activation and status collaborators."""

from .activation import StoreProfileActivator
from .file import FileStore
from .memory import InMemoryStore
from .protocols import ProxyActivator, RuleStore, StateStore, StatusReporter
from .status import LoggingStatusReporter

__all__ = [
    "FileStore",
    "InMemoryStore",
    "LoggingStatusReporter",
    "ProxyActivator",
    "RuleStore",
    "StateStore",
    "StatusReporter",
    "StoreProfileActivator",
]
