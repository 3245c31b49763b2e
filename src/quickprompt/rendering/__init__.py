"""Rendering helpers for response text."""

from .diff import DiffKind, DiffSegment, diff_words_with_space, render_diff, should_render_diff

__all__ = ["DiffKind", "DiffSegment", "diff_words_with_space", "render_diff", "should_render_diff"]
