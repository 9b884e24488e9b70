"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any host-specific post or user types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Post:
    """Minimal post record read by the tagging rule."""

    id: int
    title: str
    content: str
    type: str
    status: str = "publish"


@dataclass(frozen=True)
class Principal:
    """The acting user on whose behalf a save or backfill step runs."""

    user_id: str
    role: str


@dataclass(frozen=True)
class PostPage:
    """One page of post ids plus the total page count for the query."""

    ids: list[int] = field(default_factory=list)
    total_pages: int = 0


@dataclass(frozen=True)
class BackfillState:
    """Continuation state carried between backfill steps."""

    principal: Principal
    token: Optional[str]
    page: int = 1


@dataclass(frozen=True)
class BackfillStep:
    """Outcome of a single backfill step."""

    page: int
    state: BackfillState
    done: bool
    processed: int
    tagged: int
    total_pages: int
