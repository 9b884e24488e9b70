"""Text and slug normalization helpers (core domain)."""

from __future__ import annotations

import re

from slugify import slugify

_TAG_RE = re.compile(r"<[^>]*>")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_SLUG_DISALLOWED = r"[^-a-z0-9_]+"


def _strip_tags(value: str) -> str:
    return _TAG_RE.sub("", value)


def _collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def sanitize_text(value: object) -> str:
    """Return a single-line, tag-free version of a settings text field."""

    if value is None:
        return ""
    text = _strip_tags(str(value))
    text = _OCTET_RE.sub("", text)
    # Control characters other than whitespace are dropped before collapsing.
    text = "".join(ch for ch in text if ch.isprintable() or ch.isspace())
    return _collapse_whitespace(text)


def normalize_slug(value: object) -> str:
    """Normalize a tag identifier into a taxonomy-safe slug.

    Lower-cases, transliterates to ASCII and turns any run of disallowed
    characters into a single dash. Returns "" when nothing usable remains.
    """

    if value is None:
        return ""
    return slugify(_strip_tags(str(value)), regex_pattern=_SLUG_DISALLOWED)
