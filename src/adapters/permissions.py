"""Role-based authorization adapter.

Implements the core AuthorizationPort with a small fixed role table. Own-post
edits are checked against the content store's author column.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

from core.models import Principal

MANAGE_OPTIONS = "manage_options"
EDIT_OTHERS_POSTS = "edit_others_posts"
EDIT_POSTS = "edit_posts"

ROLE_CAPABILITIES: dict[str, frozenset[str]] = {
    "administrator": frozenset({MANAGE_OPTIONS, EDIT_OTHERS_POSTS, EDIT_POSTS}),
    "editor": frozenset({EDIT_OTHERS_POSTS, EDIT_POSTS}),
    "author": frozenset({EDIT_POSTS}),
    "contributor": frozenset({EDIT_POSTS}),
}


class RoleAuthorizer:
    """Answers capability questions from a principal's role."""

    def __init__(self, post_author: Callable[[int], Optional[str]]) -> None:
        self._post_author = post_author

    @staticmethod
    def _capabilities(principal: Principal) -> frozenset[str]:
        return ROLE_CAPABILITIES.get(principal.role, frozenset())

    def can_manage_options(self, principal: Principal) -> bool:
        return MANAGE_OPTIONS in self._capabilities(principal)

    def can_edit_post(self, principal: Principal, post_id: int) -> bool:
        caps = self._capabilities(principal)
        if EDIT_OTHERS_POSTS in caps:
            return True
        if EDIT_POSTS not in caps:
            return False
        return self._post_author(post_id) == principal.user_id


def resolve_principal(user_id: Optional[str], users: Mapping[str, str]) -> Optional[Principal]:
    """Map a configured user name to a Principal, or None if unknown."""

    if not user_id:
        return None
    role = users.get(user_id)
    if role is None:
        return None
    return Principal(user_id=user_id, role=role)
