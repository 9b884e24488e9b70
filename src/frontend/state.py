"""State container for options loading and dirty tracking."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ConfigState:
    data: dict[str, str] = field(default_factory=dict)
    dirty: bool = False
    error: str | None = None
