"""In-memory fakes for the core ports, shared by the core tests."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from core.errors import StoreFailure, TermExistsError
from core.models import Post, PostPage, Principal

EXCLUDED_STATUSES = {"trash", "auto-draft"}


class FakeStore:
    """Settings, content and taxonomy store backed by dicts.

    ``calls`` records every content/taxonomy access so tests can assert that
    an aborted operation never reached the store.
    """

    def __init__(self) -> None:
        self.options: dict[str, Any] = {}
        self.posts: dict[int, Post] = {}
        self.autosaves: set[int] = set()
        self.revisions: set[int] = set()
        self.terms: set[str] = set()
        self.post_tags: dict[int, set[str]] = {}
        self.calls: list[str] = []
        self.created: list[str] = []
        self.fail_attach_after: Optional[int] = None
        self.race_on_create = False
        self._attaches = 0

    def add_post(self, post: Post, tags: Sequence[str] = ()) -> Post:
        self.posts[post.id] = post
        if tags:
            self.post_tags[post.id] = set(tags)
        return post

    def load_options(self, name: str) -> Any:
        return self.options.get(name)

    def save_options(self, name: str, value: dict) -> None:
        self.options[name] = value

    def query_posts(
        self,
        post_type: str,
        status: str = "any",
        page: int = 1,
        page_size: int = 200,
    ) -> PostPage:
        self.calls.append(f"query_posts:{page}")
        ids = sorted(
            post.id
            for post in self.posts.values()
            if post.type == post_type
            and (post.status not in EXCLUDED_STATUSES if status == "any" else post.status == status)
        )
        total_pages = -(-len(ids) // page_size)
        start = (page - 1) * page_size
        return PostPage(ids=ids[start : start + page_size], total_pages=total_pages)

    def get_post(self, post_id: int) -> Optional[Post]:
        self.calls.append(f"get_post:{post_id}")
        return self.posts.get(post_id)

    def is_autosave(self, post_id: int) -> bool:
        return post_id in self.autosaves

    def is_revision(self, post_id: int) -> bool:
        return post_id in self.revisions

    def term_exists(self, slug: str) -> bool:
        self.calls.append(f"term_exists:{slug}")
        return slug in self.terms

    def create_term(self, slug: str) -> None:
        self.calls.append(f"create_term:{slug}")
        if self.race_on_create:
            # Another writer inserted the slug between the check and the create.
            self.terms.add(slug)
        if slug in self.terms:
            raise TermExistsError(slug)
        self.terms.add(slug)
        self.created.append(slug)

    def set_post_tags(self, post_id: int, slugs: Sequence[str], additive: bool = True) -> None:
        self.calls.append(f"set_post_tags:{post_id}")
        if self.fail_attach_after is not None and self._attaches >= self.fail_attach_after:
            raise StoreFailure("taxonomy write failed")
        self._attaches += 1
        current = self.post_tags.setdefault(post_id, set())
        if not additive:
            current.clear()
        current.update(slugs)

    def tags(self, post_id: int) -> set[str]:
        return set(self.post_tags.get(post_id, set()))


class FakeAuthorizer:
    def __init__(self, can_edit: bool = True, can_manage: bool = True) -> None:
        self.can_edit = can_edit
        self.can_manage = can_manage

    def can_edit_post(self, principal: Principal, post_id: int) -> bool:
        return self.can_edit

    def can_manage_options(self, principal: Principal) -> bool:
        return self.can_manage


class FixedClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now
