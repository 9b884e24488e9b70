"""Trigger matching and rule evaluation logic (core domain)."""

from __future__ import annotations

import re
from typing import Callable, Optional

from core.config import TaggingConfig
from core.models import Post

Matcher = Callable[[str, str], bool]


def compile_trigger(trigger: str) -> Optional[re.Pattern]:
    """Compile a trigger into a whole-word, case-insensitive pattern.

    Returns None for a blank trigger so callers can treat it as "never matches".
    """

    trigger = (trigger or "").strip()
    if not trigger:
        return None
    return re.compile(r"\b" + re.escape(trigger) + r"\b", re.IGNORECASE)


def matches(text: str, trigger: str) -> bool:
    """Return True when trigger occurs in text as a whole word."""

    pattern = compile_trigger(trigger)
    if pattern is None:
        return False
    return pattern.search(text or "") is not None


def should_tag(post: Post, config: TaggingConfig, matcher: Matcher = matches) -> bool:
    """Decide whether the configured tag applies to a post.

    Matching logic:
    - A config whose tag slug normalizes to empty never tags anything.
    - The title is checked first; a title hit skips the content scan.
    - Otherwise the content trigger decides.
    """

    if not config.effective_tag:
        return False
    if matcher(post.title, config.title_trigger):
        return True
    return matcher(post.content, config.content_trigger)


class TaggingRule:
    """Binds a config to the matcher so callers can evaluate many posts."""

    def __init__(self, config: TaggingConfig, matcher: Matcher = matches) -> None:
        self._config = config
        self._matcher = matcher

    @property
    def config(self) -> TaggingConfig:
        return self._config

    @property
    def tag_slug(self) -> str:
        return self._config.effective_tag

    def should_tag(self, post: Post) -> bool:
        return should_tag(post, self._config, self._matcher)
