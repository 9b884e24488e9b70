"""Save-event handler.

This module is host-agnostic. It only relies on ports for settings, content,
taxonomy and authorization, so any CMS can call it from its own save event.
"""

from __future__ import annotations

import logging
from typing import Any

from core.config import OPTION_NAME, TARGET_POST_TYPE, TaggingConfig
from core.models import Post, Principal
from core.ports import AuthorizationPort, ContentRepositoryPort, SettingsPort
from core.registrar import TagRegistrar
from core.rules_engine import Matcher, matches, should_tag

LOGGER = logging.getLogger(__name__)


class SaveHook:
    """Applies the tagging rule to a single post when it is saved."""

    def __init__(
        self,
        settings: SettingsPort,
        content: ContentRepositoryPort,
        registrar: TagRegistrar,
        authorizer: AuthorizationPort,
        target_post_type: str = TARGET_POST_TYPE,
        matcher: Matcher = matches,
    ) -> None:
        self._settings = settings
        self._content = content
        self._registrar = registrar
        self._authorizer = authorizer
        self._target_post_type = target_post_type
        self._matcher = matcher

    def on_save(self, post_id: int, post: Any, is_update: bool, principal: Principal) -> bool:
        """Process one save event. Returns True if the tag was attached.

        Every guard failure is a silent no-op: a save should never surface an
        error to the editor because the rule does not apply.
        """

        # Autosaves and revision snapshots are transient copies of the real post.
        if self._content.is_autosave(post_id) or self._content.is_revision(post_id):
            LOGGER.debug("Skip %s: autosave or revision", post_id)
            return False
        if not isinstance(post, Post):
            LOGGER.debug("Skip %s: not a materialized post", post_id)
            return False
        if post.type != self._target_post_type:
            return False
        if not self._authorizer.can_edit_post(principal, post_id):
            LOGGER.debug("Skip %s: %s may not edit it", post_id, principal.user_id)
            return False

        # Options are read on every event so settings edits apply immediately.
        config = TaggingConfig.from_options(self._settings.load_options(OPTION_NAME))
        if not should_tag(post, config, self._matcher):
            return False

        tag_slug = self._registrar.ensure_exists(config.tag_slug)
        self._registrar.attach(post.id, tag_slug)
        LOGGER.info(
            "Tagged post %s with %s (%s)",
            post.id,
            tag_slug,
            "update" if is_update else "create",
        )
        return True
