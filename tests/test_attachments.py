"""Tests for loading picked files as attachments."""

from __future__ import annotations

from pathlib import Path

from quickprompt.services.attachments import guess_mime_type, load_attachments

PNG_HEADER = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8


def test_existing_files_are_loaded_and_others_skipped(tmp_path: Path) -> None:
    image = tmp_path / "shot.png"
    image.write_bytes(PNG_HEADER)
    folder = tmp_path / "folder"
    folder.mkdir()
    missing = tmp_path / "missing.txt"

    attachments = load_attachments([image, folder, missing])

    assert len(attachments) == 1
    assert attachments[0].data == PNG_HEADER
    assert attachments[0].mime_type == "image/png"
    assert attachments[0].name == "shot.png"


def test_symlinks_are_skipped(tmp_path: Path) -> None:
    target = tmp_path / "real.txt"
    target.write_text("hi", encoding="utf-8")
    link = tmp_path / "link.txt"
    link.symlink_to(target)

    attachments = load_attachments([str(link), str(target)])

    assert [attachment.name for attachment in attachments] == ["real.txt"]


def test_order_is_preserved(tmp_path: Path) -> None:
    names = ["b.txt", "a.txt", "c.txt"]
    for name in names:
        (tmp_path / name).write_text(name, encoding="utf-8")

    attachments = load_attachments([tmp_path / name for name in names])

    assert [attachment.name for attachment in attachments] == names


def test_empty_input_yields_nothing() -> None:
    assert load_attachments(None) == ()
    assert load_attachments([]) == ()


def test_guess_mime_type_prefers_magic_bytes() -> None:
    assert guess_mime_type(Path("wrong.txt"), b"\xff\xd8\xff\xe0rest") == "image/jpeg"
    assert guess_mime_type(Path("file.webp"), b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"
    assert guess_mime_type(Path("notes.txt"), b"plain") == "text/plain"
    assert guess_mime_type(Path("blob"), b"\x00\x01") == "application/octet-stream"
