"""Ports (interfaces) used by the core.

Ports define the minimal contracts for settings, content, taxonomy, and
authorization adapters so that the core can be reused with different hosts.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from core.models import Post, PostPage, Principal


class SettingsPort(Protocol):
    """Key-value settings store keyed by option name."""

    def load_options(self, name: str) -> Any:
        ...

    def save_options(self, name: str, value: dict) -> None:
        ...


class ContentRepositoryPort(Protocol):
    """Post storage and its pagination facility."""

    def query_posts(
        self,
        post_type: str,
        status: str = "any",
        page: int = 1,
        page_size: int = 200,
    ) -> PostPage:
        ...

    def get_post(self, post_id: int) -> Optional[Post]:
        ...

    def is_autosave(self, post_id: int) -> bool:
        ...

    def is_revision(self, post_id: int) -> bool:
        ...


class TaxonomyPort(Protocol):
    """Tag storage and post-tag associations."""

    def term_exists(self, slug: str) -> bool:
        ...

    def create_term(self, slug: str) -> None:
        ...

    def set_post_tags(self, post_id: int, slugs: Sequence[str], additive: bool = True) -> None:
        ...


class AuthorizationPort(Protocol):
    """Capability checks for the acting principal."""

    def can_edit_post(self, principal: Principal, post_id: int) -> bool:
        ...

    def can_manage_options(self, principal: Principal) -> bool:
        ...
