"""Validation helpers for options editing."""

from __future__ import annotations

from dataclasses import dataclass

from core.config import sanitize_options


@dataclass
class OptionsCheck:
    cleaned: dict[str, str]
    errors: dict[str, str]
    warnings: list[str]


def check_options(raw: dict[str, str]) -> OptionsCheck:
    """Preview what sanitizing the form will store and flag surprises."""

    cleaned = sanitize_options(raw)
    errors: dict[str, str] = {}
    warnings: list[str] = []

    raw_slug = raw.get("tag_slug", "").strip()
    if not cleaned["tag_slug"]:
        if raw_slug:
            errors["tag_slug"] = "tag slug has no usable characters"
        else:
            warnings.append("tag slug is empty: the rule is disabled")
    elif cleaned["tag_slug"] != raw_slug:
        warnings.append(f"tag slug will be saved as '{cleaned['tag_slug']}'")

    if not cleaned["title_trigger"] and not cleaned["content_trigger"]:
        warnings.append("no triggers set: nothing will be tagged")

    return OptionsCheck(cleaned=cleaned, errors=errors, warnings=warnings)
