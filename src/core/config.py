"""Core configuration dataclasses.

Options are persisted outside the core (settings store), but these dataclasses
define the shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from core.slugs import normalize_slug, sanitize_text

OPTION_NAME = "autotagger_options"
TARGET_POST_TYPE = "post"
BACKFILL_PAGE_SIZE = 200

DEFAULT_OPTIONS: dict[str, str] = {
    "title_trigger": "",
    "content_trigger": "",
    "tag_slug": "review",
}


def _text_field(value: Any) -> str:
    # A stored field that is not a string counts as unset.
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class TaggingConfig:
    """The three configured values of the tagging rule."""

    title_trigger: str = ""
    content_trigger: str = ""
    tag_slug: str = "review"

    @classmethod
    def from_options(cls, raw: Any) -> "TaggingConfig":
        """Build a config from a stored options record, filling defaults.

        Anything that is not a mapping counts as an empty record.
        """

        opts = dict(DEFAULT_OPTIONS)
        if isinstance(raw, Mapping):
            opts.update({key: raw[key] for key in DEFAULT_OPTIONS if key in raw})
        return cls(
            title_trigger=_text_field(opts["title_trigger"]),
            content_trigger=_text_field(opts["content_trigger"]),
            tag_slug=_text_field(opts["tag_slug"]),
        )

    @property
    def effective_tag(self) -> str:
        return normalize_slug(self.tag_slug)

    @property
    def has_triggers(self) -> bool:
        return bool(self.title_trigger.strip() or self.content_trigger.strip())


def sanitize_options(raw: Any) -> dict[str, str]:
    """Clean a submitted settings form before it is persisted.

    Missing keys become empty strings; an empty tag_slug is kept as-is and
    disables the rule rather than falling back to the default.
    """

    if not isinstance(raw, Mapping):
        raw = {}
    return {
        "title_trigger": sanitize_text(_text_field(raw.get("title_trigger"))),
        "content_trigger": sanitize_text(_text_field(raw.get("content_trigger"))),
        "tag_slug": normalize_slug(_text_field(raw.get("tag_slug"))),
    }
