"""Error kinds raised by the core and its store adapters."""

from __future__ import annotations


class AutoTaggerError(Exception):
    """Base class for all autotagger errors."""


class ConfigurationDisabled(AutoTaggerError):
    """The rule has no tag target, or a backfill has nothing to match."""


class Unauthorized(AutoTaggerError):
    """The acting principal lacks the required capability."""


class InvalidContinuation(AutoTaggerError):
    """The continuation token is missing, expired, or does not match."""


class StoreFailure(AutoTaggerError):
    """A settings, content, or taxonomy store call failed."""


class TermExistsError(StoreFailure):
    """Raised by a taxonomy store when creating a slug that already exists."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Term already exists: {slug}")
        self.slug = slug
