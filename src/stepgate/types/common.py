"""Cross-module type aliases."""

from __future__ import annotations

from typing import Literal, TypeAlias

Category: TypeAlias = Literal["code", "test", "config", "docs", "unmatched"]
DetectionSource: TypeAlias = Literal["conventional", "keyword", "files", "default", "override"]

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]
