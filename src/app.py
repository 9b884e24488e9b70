"""Application entry point for autotagger."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.permissions import RoleAuthorizer, resolve_principal
from adapters.sqlite_storage import SQLiteStore
from core.backfill import BackfillJob, run_backfill
from core.errors import ConfigurationDisabled, InvalidContinuation, Unauthorized
from core.models import BackfillStep, Principal
from core.registrar import TagRegistrar
from core.save_hook import SaveHook
from core.tokens import ContinuationTokens

NAME = "AUTOTAGGER"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/autotagger.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _open_store() -> SQLiteStore:
    store = SQLiteStore(settings.DB_PATH)
    store.init_db()
    return store


def _build_tokens() -> ContinuationTokens:
    # Fail fast: unsigned continuation tokens would make every request replayable.
    if not settings.TOKEN_SECRET:
        raise RuntimeError("AUTOTAGGER_SECRET is required in the environment")
    return ContinuationTokens(settings.TOKEN_SECRET, settings.TOKEN_LIFETIME_SECONDS)


def _require_principal(user: str) -> Principal:
    principal = resolve_principal(user, settings.USERS)
    if principal is None:
        raise RuntimeError(f"Unknown user {user!r}; add it to config.json users")
    return principal


def _serve() -> None:
    import uvicorn

    from adapters.http_backfill import create_app

    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    store = _open_store()
    app = create_app(
        store=store,
        authorizer=RoleAuthorizer(store.post_author),
        tokens=_build_tokens(),
        users=settings.USERS,
        target_post_type=settings.TARGET_POST_TYPE,
        page_size=settings.PAGE_SIZE,
    )
    logger.info("Serving on %s:%s", settings.SERVER_HOST, settings.SERVER_PORT)
    uvicorn.run(app, host=settings.SERVER_HOST, port=settings.SERVER_PORT, log_config=None)


def _backfill(user: str) -> int:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    store = _open_store()
    principal = _require_principal(user)
    job = BackfillJob(
        settings=store,
        content=store,
        registrar=TagRegistrar(store),
        authorizer=RoleAuthorizer(store.post_author),
        tokens=_build_tokens(),
        target_post_type=settings.TARGET_POST_TYPE,
        page_size=settings.PAGE_SIZE,
    )

    def _report(step: BackfillStep) -> None:
        print(f"page {step.page}/{step.total_pages}: processed={step.processed} tagged={step.tagged}")

    try:
        steps = run_backfill(job, job.start(principal), on_step=_report)
    except (Unauthorized, InvalidContinuation, ConfigurationDisabled) as exc:
        print(f"Backfill aborted: {exc}", file=sys.stderr)
        return 2

    tagged = sum(step.tagged for step in steps)
    logger.info("Backfill complete: pages=%s tagged=%s", len(steps), tagged)
    return 0


def _tag_post(post_id: int, user: str) -> int:
    _configure_logging()

    store = _open_store()
    principal = _require_principal(user)
    hook = SaveHook(
        settings=store,
        content=store,
        registrar=TagRegistrar(store),
        authorizer=RoleAuthorizer(store.post_author),
        target_post_type=settings.TARGET_POST_TYPE,
    )
    post = store.get_post(post_id)
    if post is None:
        print(f"Post {post_id} not found", file=sys.stderr)
        return 1
    tagged = hook.on_save(post_id, post, True, principal)
    print(f"post {post_id}: {'tagged' if tagged else 'unchanged'}; tags={sorted(store.list_post_tags(post_id))}")
    return 0


def _setup() -> None:
    _print_banner()
    from frontend.app import ConfigPanelApp

    ConfigPanelApp(_open_store()).run()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="autotagger")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("serve", help="Start the settings/backfill HTTP surface")
    subparsers.add_parser("config", help="Launch the config TUI")

    backfill_parser = subparsers.add_parser("backfill", help="Tag all existing posts, page by page")
    backfill_parser.add_argument("--user", required=True, help="Configured user running the backfill")

    tag_parser = subparsers.add_parser("tag-post", help="Re-run the save hook for one stored post")
    tag_parser.add_argument("post_id", type=int)
    tag_parser.add_argument("--user", required=True, help="Configured user saving the post")

    args = parser.parse_args(argv)
    if args.command == "config":
        _setup()
        return
    if args.command == "backfill":
        sys.exit(_backfill(args.user))
    if args.command == "tag-post":
        sys.exit(_tag_post(args.post_id, args.user))
    _serve()


if __name__ == "__main__":
    main()
