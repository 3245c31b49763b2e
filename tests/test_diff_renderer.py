"""Tests for the word-level diff renderer."""

from __future__ import annotations

import pytest

from quickprompt.rendering.diff import (
    DiffKind,
    DiffSegment,
    diff_words_with_space,
    render_diff,
    render_segments,
    should_render_diff,
    tokenize,
)


def test_tokenize_splits_words_whitespace_and_punctuation() -> None:
    assert tokenize("Hi, there!") == ["Hi", ",", " ", "there", "!"]
    assert tokenize("a \n\tb") == ["a", " \n\t", "b"]


@pytest.mark.parametrize(
    "text",
    ["", "Hello world", "Hello,  world!\nSecond line.", "  leading and trailing  "],
)
def test_render_diff_of_identical_text_is_unmarked(text: str) -> None:
    assert render_diff(text, text) == text


def test_insertion_between_words_is_bold() -> None:
    segments = diff_words_with_space("foo bar", "foo baz bar")

    assert segments == (
        DiffSegment(DiffKind.UNCHANGED, "foo "),
        DiffSegment(DiffKind.INSERTED, "baz "),
        DiffSegment(DiffKind.UNCHANGED, "bar"),
    )
    assert render_diff("foo bar", "foo baz bar") == "foo **baz **bar"


def test_replacement_separates_deletion_from_insertion() -> None:
    rendered = render_diff("hello world", "hello there")

    assert rendered == "hello ~~*world*~~ **there**"
    assert "~~**" not in rendered


def test_no_extra_space_when_insertion_starts_with_space() -> None:
    segments = [DiffSegment(DiffKind.DELETED, "old"), DiffSegment(DiffKind.INSERTED, " new")]

    assert render_segments(segments) == "~~*old*~~** new**"


def test_blank_deletion_does_not_trigger_separator() -> None:
    segments = [DiffSegment(DiffKind.DELETED, " "), DiffSegment(DiffKind.INSERTED, "new")]

    assert render_segments(segments) == " **new**"


def test_whitespace_only_segments_pass_through_raw() -> None:
    segments = diff_words_with_space("a b", "a  b")

    kinds = {segment.kind for segment in segments}
    assert DiffKind.DELETED in kinds
    assert DiffKind.INSERTED in kinds
    rendered = render_diff("a b", "a  b")
    assert "**" not in rendered
    assert "~~" not in rendered


def test_deletion_only_is_struck_through() -> None:
    assert render_diff("keep drop", "keep ") == "keep ~~*drop*~~"


def test_adjacent_segments_of_same_kind_are_merged() -> None:
    segments = diff_words_with_space("one", "one two three")

    assert segments == (
        DiffSegment(DiffKind.UNCHANGED, "one"),
        DiffSegment(DiffKind.INSERTED, " two three"),
    )


@pytest.mark.parametrize(
    ("show_diff", "reference", "result", "expected"),
    [
        (True, "before", "after", True),
        (False, "before", "after", False),
        (True, "", "after", False),
        (True, None, "after", False),
        (True, "before", None, False),
        (True, b"before", "after", False),
    ],
)
def test_should_render_diff_requires_textual_reference(show_diff, reference, result, expected) -> None:
    assert should_render_diff(show_diff, reference, result) is expected
