"""Word-level diff rendering between a reference text and a model response."""

from __future__ import annotations

import difflib
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

__all__ = [
    "DiffKind",
    "DiffSegment",
    "diff_words_with_space",
    "render_diff",
    "render_segments",
    "should_render_diff",
    "tokenize",
]

# Word runs, whitespace runs, or a single other character.
_TOKEN_PATTERN = re.compile(r"\w+|\s+|[^\w\s]", re.UNICODE)


class DiffKind(Enum):
    UNCHANGED = "unchanged"
    INSERTED = "inserted"
    DELETED = "deleted"


@dataclass(slots=True, frozen=True)
class DiffSegment:
    """A run of text that is common to both sides, or present on one side only."""

    kind: DiffKind
    text: str

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


def tokenize(text: str) -> list[str]:
    """Split ``text`` into word, whitespace, and punctuation tokens."""

    return _TOKEN_PATTERN.findall(text)


def diff_words_with_space(reference: str, result: str) -> tuple[DiffSegment, ...]:
    """Compare two texts token by token, treating whitespace as significant.

    Replacements are reported as a deleted segment followed by an inserted
    segment. Consecutive segments of the same kind are merged.
    """

    before = tokenize(reference)
    after = tokenize(result)
    matcher = difflib.SequenceMatcher(a=before, b=after, autojunk=False)
    segments: list[DiffSegment] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            _append(segments, DiffKind.UNCHANGED, before[i1:i2])
            continue
        if tag in ("delete", "replace"):
            _append(segments, DiffKind.DELETED, before[i1:i2])
        if tag in ("insert", "replace"):
            _append(segments, DiffKind.INSERTED, after[j1:j2])
    return tuple(segments)


def render_segments(segments: Sequence[DiffSegment]) -> str:
    """Render diff segments as Markdown.

    Insertions are bold and deletions are struck through in italics.
    Whitespace-only segments pass through unmarked. An insertion that
    directly follows a visible deletion is separated from it by one space
    when neither side already provides one.
    """

    markdown = ""
    previous: DiffSegment | None = None
    for segment in segments:
        if segment.kind is DiffKind.INSERTED and not segment.is_blank:
            prefix = ""
            if (
                previous is not None
                and previous.kind is DiffKind.DELETED
                and not previous.is_blank
                and not markdown.endswith(" ")
                and not segment.text.startswith(" ")
            ):
                prefix = " "
            markdown += f"{prefix}**{segment.text}**"
        elif segment.kind is DiffKind.DELETED and not segment.is_blank:
            markdown += f"~~*{segment.text}*~~"
        else:
            markdown += segment.text
        previous = segment
    return markdown


def render_diff(reference: str, result: str) -> str:
    """Return Markdown marking how ``result`` differs from ``reference``."""

    return render_segments(diff_words_with_space(reference, result))


def should_render_diff(show_diff: bool, reference: Any, result: Any) -> bool:
    """Diffs are only drawn against a non-empty textual reference."""

    return bool(show_diff) and isinstance(reference, str) and bool(reference) and isinstance(result, str)


def _append(segments: list[DiffSegment], kind: DiffKind, tokens: Iterable[str]) -> None:
    text = "".join(tokens)
    if not text:
        return
    if segments and segments[-1].kind is kind:
        segments[-1] = DiffSegment(kind, segments[-1].text + text)
        return
    segments.append(DiffSegment(kind, text))
