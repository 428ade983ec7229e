"""Cross-module type aliases."""

from __future__ import annotations

from typing import Literal, TypeAlias

CaptivePortalState: TypeAlias = Literal["locked", "unlocked", "unknown"]
DnsMatchMode: TypeAlias = Literal["exact", "regex"]
ProfileMode: TypeAlias = Literal["direct", "system", "manual", "pac", "perRequest"]
OutcomeStatus: TypeAlias = Literal["skipped", "matched", "no_match", "failed"]
LogLevelName: TypeAlias = Literal["debug", "info", "warning", "error"]

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]
