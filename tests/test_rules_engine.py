from __future__ import annotations

import pytest

from core.config import TaggingConfig
from core.models import Post
from core.rules_engine import TaggingRule, compile_trigger, matches, should_tag


def _post(title: str = "", content: str = "") -> Post:
    return Post(id=1, title=title, content=content, type="post")


class RecordingMatcher:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def __call__(self, text: str, trigger: str) -> bool:
        self.calls.append((text, trigger))
        return matches(text, trigger)


@pytest.mark.parametrize("text", ["", "review", "anything at all", "\x00\x01"])
@pytest.mark.parametrize("trigger", ["", "   ", "\t\n"])
def test_blank_trigger_never_matches(text: str, trigger: str) -> None:
    assert matches(text, trigger) is False
    assert compile_trigger(trigger) is None


def test_whole_word_only() -> None:
    assert matches("preview", "review") is False
    assert matches("reviewed yesterday", "review") is False
    assert matches("my review today", "review") is True


def test_case_insensitive_and_punctuation_bounded() -> None:
    assert matches("Review!", "review") is True
    assert matches("(REVIEW)", "review") is True
    assert matches("Spoiler: Season Finale", "spoiler") is True


def test_trigger_is_trimmed() -> None:
    assert matches("my review today", "  review  ") is True


def test_trigger_is_literal() -> None:
    assert matches("see a.b today", "a.b") is True
    assert matches("see axb today", "a.b") is False
    assert matches("nothing [here", "[") is False


def test_unicode_text_and_trigger() -> None:
    assert matches("un café noir", "café") is True
    assert matches("cafés", "café") is False


def test_multi_word_trigger() -> None:
    assert matches("A Spoiler Alert for you", "spoiler alert") is True


def test_title_match_skips_content() -> None:
    matcher = RecordingMatcher()
    config = TaggingConfig(title_trigger="spoiler", content_trigger="spoiler", tag_slug="spoiler-warning")
    post = _post(title="Spoiler: Season Finale", content="huge body " * 1000)

    assert should_tag(post, config, matcher) is True
    assert len(matcher.calls) == 1
    assert matcher.calls[0][0] == post.title


def test_content_checked_when_title_misses() -> None:
    matcher = RecordingMatcher()
    config = TaggingConfig(title_trigger="spoiler", content_trigger="finale", tag_slug="review")
    post = _post(title="Weekly roundup", content="The finale aired.")

    assert should_tag(post, config, matcher) is True
    assert [trigger for _, trigger in matcher.calls] == ["spoiler", "finale"]


def test_no_trigger_hit() -> None:
    config = TaggingConfig(title_trigger="spoiler", content_trigger="finale", tag_slug="review")
    assert should_tag(_post(title="Weekly roundup", content="nothing"), config) is False


@pytest.mark.parametrize("tag_slug", ["", "   ", "!!!", "<b></b>"])
def test_disabled_rule_never_tags(tag_slug: str) -> None:
    matcher = RecordingMatcher()
    config = TaggingConfig(title_trigger="spoiler", content_trigger="spoiler", tag_slug=tag_slug)

    assert should_tag(_post(title="spoiler", content="spoiler"), config, matcher) is False
    assert matcher.calls == []


def test_tagging_rule_exposes_normalized_slug() -> None:
    rule = TaggingRule(TaggingConfig(title_trigger="x", tag_slug="Spoiler Warning"))
    assert rule.tag_slug == "spoiler-warning"
    assert rule.should_tag(_post(title="x marks the spot")) is True
