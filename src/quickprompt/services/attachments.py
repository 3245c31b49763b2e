"""Load user-picked files into attachments for a request."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Iterable

from ..ai.ai_types import DEFAULT_MIME_TYPE, Attachment

__all__ = ["load_attachments", "guess_mime_type"]

LOGGER = logging.getLogger(__name__)

_MAGIC_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"%PDF-", "application/pdf"),
)


def load_attachments(paths: Iterable[str | Path] | None) -> tuple[Attachment, ...]:
    """Read every path that names an existing regular file.

    Missing paths, directories, and other non-regular entries are skipped
    without raising.
    """

    if not paths:
        return ()
    attachments: list[Attachment] = []
    for raw in paths:
        path = Path(raw).expanduser()
        # symlinks are never followed
        if path.is_symlink() or not path.is_file():
            LOGGER.debug("Skipping attachment %s: not a regular file", path)
            continue
        data = path.read_bytes()
        attachments.append(Attachment(data=data, mime_type=guess_mime_type(path, data), name=path.name))
    return tuple(attachments)


def guess_mime_type(path: Path, data: bytes) -> str:
    for signature, mime_type in _MAGIC_SIGNATURES:
        if data.startswith(signature):
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or DEFAULT_MIME_TYPE
