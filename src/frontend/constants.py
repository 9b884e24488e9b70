"""Shared constants for the Textual UI."""

from __future__ import annotations

ACCENT = "#2AABEE"
OPTION_FIELDS = ("title_trigger", "content_trigger", "tag_slug")
