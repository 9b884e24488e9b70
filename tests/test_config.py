from __future__ import annotations

import pytest

from core.config import DEFAULT_OPTIONS, TaggingConfig, sanitize_options
from core.slugs import normalize_slug, sanitize_text


@pytest.mark.parametrize("raw", [None, "garbage", 42, ["title_trigger"]])
def test_non_mapping_options_use_defaults(raw) -> None:
    config = TaggingConfig.from_options(raw)
    assert config == TaggingConfig(title_trigger="", content_trigger="", tag_slug="review")


def test_missing_fields_are_filled_from_defaults() -> None:
    config = TaggingConfig.from_options({"title_trigger": "spoiler"})
    assert config.title_trigger == "spoiler"
    assert config.content_trigger == DEFAULT_OPTIONS["content_trigger"]
    assert config.tag_slug == "review"


def test_stored_empty_slug_disables_rule() -> None:
    config = TaggingConfig.from_options({"title_trigger": "spoiler", "tag_slug": ""})
    assert config.effective_tag == ""


def test_has_triggers_ignores_whitespace() -> None:
    assert TaggingConfig(title_trigger="  ", content_trigger="\t").has_triggers is False
    assert TaggingConfig(content_trigger="finale").has_triggers is True


def test_sanitize_options_cleans_each_field() -> None:
    clean = sanitize_options(
        {
            "title_trigger": " <b>Spoiler</b>\n  alert ",
            "content_trigger": "finale\x07",
            "tag_slug": "Spoiler Warning!",
            "extra": "dropped",
        }
    )
    assert clean == {
        "title_trigger": "Spoiler alert",
        "content_trigger": "finale",
        "tag_slug": "spoiler-warning",
    }


def test_sanitize_options_without_mapping() -> None:
    assert sanitize_options(None) == {"title_trigger": "", "content_trigger": "", "tag_slug": ""}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("review", "review"),
        ("Spoiler Warning", "spoiler-warning"),
        ("  Café   Reviews ", "cafe-reviews"),
        ("snake_case tag", "snake_case-tag"),
        ("<em>hot</em> take", "hot-take"),
        ("---", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_slug(raw, expected: str) -> None:
    assert normalize_slug(raw) == expected


def test_sanitize_text_drops_octets_and_tags() -> None:
    assert sanitize_text("100%20 <i>off</i>") == "100 off"
    assert sanitize_text(None) == ""


@pytest.mark.parametrize("value", [["spoiler"], {"x": 1}, 42, None])
def test_non_string_stored_fields_are_unset(value) -> None:
    config = TaggingConfig.from_options(
        {"title_trigger": value, "content_trigger": value, "tag_slug": value}
    )
    assert config == TaggingConfig(title_trigger="", content_trigger="", tag_slug="")
    assert config.has_triggers is False
    assert config.effective_tag == ""


def test_sanitize_options_drops_non_string_fields() -> None:
    clean = sanitize_options({"title_trigger": ["spoiler"], "content_trigger": 7, "tag_slug": ["review"]})
    assert clean == {"title_trigger": "", "content_trigger": "", "tag_slug": ""}
