"""Resumable, paginated backfill of the tagging rule.

The job is a step function: each call processes exactly one page and returns
the state for the next call. Drivers (an HTTP redirect loop, the CLI) decide
when to call again; nothing here loops over pages or keeps state between
calls.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from core.config import BACKFILL_PAGE_SIZE, OPTION_NAME, TARGET_POST_TYPE, TaggingConfig
from core.errors import ConfigurationDisabled, InvalidContinuation, Unauthorized
from core.models import BackfillState, BackfillStep, Principal
from core.ports import AuthorizationPort, ContentRepositoryPort, SettingsPort
from core.registrar import TagRegistrar
from core.rules_engine import TaggingRule
from core.tokens import BACKFILL_ACTION, ContinuationTokens

LOGGER = logging.getLogger(__name__)


class BackfillJob:
    """Applies the tagging rule to existing posts one page per step."""

    def __init__(
        self,
        settings: SettingsPort,
        content: ContentRepositoryPort,
        registrar: TagRegistrar,
        authorizer: AuthorizationPort,
        tokens: ContinuationTokens,
        target_post_type: str = TARGET_POST_TYPE,
        page_size: int = BACKFILL_PAGE_SIZE,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._settings = settings
        self._content = content
        self._registrar = registrar
        self._authorizer = authorizer
        self._tokens = tokens
        self._target_post_type = target_post_type
        self._page_size = page_size

    def start(self, principal: Principal) -> BackfillState:
        """Return the initial state with a freshly issued token."""

        return BackfillState(
            principal=principal,
            token=self._tokens.issue(BACKFILL_ACTION, principal.user_id),
            page=1,
        )

    def step(self, state: BackfillState) -> BackfillStep:
        """Process the page named by state.

        Raises Unauthorized, InvalidContinuation or ConfigurationDisabled
        before any store access. Store errors propagate mid-page; posts
        already tagged in that page stay tagged.
        """

        principal = state.principal
        if not self._authorizer.can_manage_options(principal):
            raise Unauthorized(f"{principal.user_id} may not run the backfill")
        if not self._tokens.verify(state.token, BACKFILL_ACTION, principal.user_id):
            raise InvalidContinuation("Missing or expired backfill token")

        # Config is reloaded per page; edits made mid-run apply to later pages.
        config = TaggingConfig.from_options(self._settings.load_options(OPTION_NAME))
        if not config.effective_tag:
            raise ConfigurationDisabled("Set a tag slug before running the backfill")
        if not config.has_triggers:
            raise ConfigurationDisabled("Set a title or content trigger before running the backfill")

        page = max(1, state.page)
        rule = TaggingRule(config)
        tag_slug = self._registrar.ensure_exists(config.tag_slug)

        result = self._content.query_posts(
            self._target_post_type,
            status="any",
            page=page,
            page_size=self._page_size,
        )
        processed = 0
        tagged = 0
        for post_id in result.ids:
            post = self._content.get_post(post_id)
            if post is None:
                continue
            processed += 1
            if rule.should_tag(post):
                self._registrar.attach(post.id, tag_slug)
                tagged += 1

        LOGGER.info(
            "Backfill page %s/%s: processed=%s tagged=%s",
            page,
            result.total_pages,
            processed,
            tagged,
        )

        done = page >= result.total_pages
        next_state = state if done else BackfillState(principal, state.token, page + 1)
        return BackfillStep(
            page=page,
            state=next_state,
            done=done,
            processed=processed,
            tagged=tagged,
            total_pages=result.total_pages,
        )


def run_backfill(
    job: BackfillJob,
    state: BackfillState,
    on_step: Optional[Callable[[BackfillStep], None]] = None,
) -> list[BackfillStep]:
    """Drive a job in-process until it reports completion."""

    steps: list[BackfillStep] = []
    while True:
        step = job.step(state)
        steps.append(step)
        if on_step is not None:
            on_step(step)
        if step.done:
            return steps
        state = step.state
