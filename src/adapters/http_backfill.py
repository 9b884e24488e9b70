"""HTTP control surface for the settings view and the backfill.

A thin FastAPI driver around the core: each GET /backfill request runs exactly
one BackfillJob step and redirects to the next page, so no single request
outlives a page of work. The browser (or any client following redirects)
drives the loop.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from adapters.permissions import RoleAuthorizer, resolve_principal
from adapters.sqlite_storage import SQLiteStore
from core.backfill import BackfillJob
from core.config import BACKFILL_PAGE_SIZE, OPTION_NAME, TARGET_POST_TYPE, TaggingConfig, sanitize_options
from core.errors import ConfigurationDisabled, InvalidContinuation, StoreFailure, Unauthorized
from core.models import BackfillState, Principal
from core.registrar import TagRegistrar
from core.tokens import BACKFILL_ACTION, SETTINGS_ACTION, ContinuationTokens

LOGGER = logging.getLogger(__name__)

USER_HEADER = "X-Autotagger-User"


class OptionsForm(BaseModel):
    """Body of a settings form submission."""

    token: Optional[str] = None
    title_trigger: str = ""
    content_trigger: str = ""
    tag_slug: str = ""


def create_app(
    store: SQLiteStore,
    authorizer: RoleAuthorizer,
    tokens: ContinuationTokens,
    users: Mapping[str, str],
    target_post_type: str = TARGET_POST_TYPE,
    page_size: int = BACKFILL_PAGE_SIZE,
) -> FastAPI:
    """Build the FastAPI app wired to the given store and policies."""

    app = FastAPI(title="autotagger")
    job = BackfillJob(
        settings=store,
        content=store,
        registrar=TagRegistrar(store),
        authorizer=authorizer,
        tokens=tokens,
        target_post_type=target_post_type,
        page_size=page_size,
    )

    def current_principal(
        user: Optional[str] = Header(default=None, alias=USER_HEADER),
    ) -> Principal:
        principal = resolve_principal(user, users)
        if principal is None:
            raise HTTPException(status_code=403, detail="Unknown user")
        return principal

    @app.exception_handler(Unauthorized)
    async def _unauthorized(request: Request, exc: Unauthorized) -> JSONResponse:
        return JSONResponse({"detail": "Sorry, you are not allowed to do that."}, status_code=403)

    @app.exception_handler(InvalidContinuation)
    async def _invalid(request: Request, exc: InvalidContinuation) -> JSONResponse:
        return JSONResponse({"detail": "The link you followed has expired."}, status_code=400)

    @app.exception_handler(ConfigurationDisabled)
    async def _disabled(request: Request, exc: ConfigurationDisabled) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=409)

    @app.exception_handler(StoreFailure)
    async def _store_failure(request: Request, exc: StoreFailure) -> JSONResponse:
        LOGGER.error("Store failure during %s: %s", request.url.path, exc)
        return JSONResponse({"detail": "Storage error"}, status_code=500)

    @app.get("/settings")
    def settings_view(
        backfill: Optional[str] = Query(default=None),
        updated: Optional[str] = Query(default=None),
        principal: Principal = Depends(current_principal),
    ) -> dict:
        if not authorizer.can_manage_options(principal):
            raise Unauthorized(principal.user_id)
        config = TaggingConfig.from_options(store.load_options(OPTION_NAME))
        return {
            "options": {
                "title_trigger": config.title_trigger,
                "content_trigger": config.content_trigger,
                "tag_slug": config.tag_slug,
            },
            "settings_token": tokens.issue(SETTINGS_ACTION, principal.user_id),
            "backfill_token": tokens.issue(BACKFILL_ACTION, principal.user_id),
            "notice": {
                "backfill_done": backfill == "done",
                "updated": updated == "1",
            },
        }

    @app.post("/settings")
    def settings_save(
        form: OptionsForm,
        principal: Principal = Depends(current_principal),
    ) -> RedirectResponse:
        if not authorizer.can_manage_options(principal):
            raise Unauthorized(principal.user_id)
        if not tokens.verify(form.token, SETTINGS_ACTION, principal.user_id):
            raise InvalidContinuation("Missing or expired settings token")
        clean = sanitize_options(form.model_dump(exclude={"token"}))
        store.save_options(OPTION_NAME, clean)
        LOGGER.info("Options updated by %s", principal.user_id)
        return RedirectResponse("/settings?updated=1", status_code=303)

    @app.get("/backfill")
    def backfill_step(
        token: Optional[str] = Query(default=None),
        page: int = Query(default=1),
        principal: Principal = Depends(current_principal),
    ) -> RedirectResponse:
        step = job.step(BackfillState(principal=principal, token=token, page=page))
        if step.done:
            return RedirectResponse("/settings?backfill=done", status_code=303)
        return RedirectResponse(
            f"/backfill?token={step.state.token}&page={step.state.page}&status=running",
            status_code=303,
        )

    return app
