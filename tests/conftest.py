"""Shared fixtures for tagfarm tests."""

import pathlib

import pytest


def _syncsafe_bytes(n: int) -> bytes:
    return bytes((n >> shift) & 0x7F for shift in (21, 14, 7, 0))


def _frame(version: int, frame_id: str, payload: bytes) -> bytes:
    size = len(payload)
    if version == 2:
        return frame_id.encode("ascii") + size.to_bytes(3, "big") + payload
    if version == 3:
        size_field = size.to_bytes(4, "big")
    else:
        size_field = _syncsafe_bytes(size)
    return frame_id.encode("ascii") + size_field + b"\x00\x00" + payload


def _tag(version: int, frames: list[tuple[str, bytes]], *, flags: int = 0, padding: int = 0) -> bytes:
    body = b"".join(_frame(version, fid, payload) for fid, payload in frames) + b"\x00" * padding
    return b"ID3" + bytes([version, 0, flags]) + _syncsafe_bytes(len(body)) + body


@pytest.fixture
def id3_frame():
    """Build one ID3v2 frame: id3_frame(version, frame_id, payload)."""
    return _frame


@pytest.fixture
def id3_tag():
    """Build a complete ID3v2 tag: id3_tag(version, [(frame_id, payload), ...])."""
    return _tag


@pytest.fixture
def tmp_music(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a temporary music directory."""
    music = tmp_path / "music"
    music.mkdir()
    return music


@pytest.fixture
def tmp_farm(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a temporary link farm directory."""
    farm = tmp_path / "farm"
    farm.mkdir()
    return farm


@pytest.fixture
def sample_mp3(tmp_music: pathlib.Path) -> pathlib.Path:
    """Create an MP3 file with an ID3v2.3 tag (artist, album, title, track)."""
    p = tmp_music / "song.mp3"
    p.write_bytes(
        _tag(3, [
            ("TPE1", b"\x00Miles Davis\x00"),
            ("TALB", b"\x00Kind of Blue\x00"),
            ("TIT2", b"\x00So What\x00"),
            ("TRCK", b"\x001/5\x00"),
        ], padding=32)
        + b"\xff\xfb\x90\x00" + b"\x00" * 64
    )
    return p


@pytest.fixture
def sample_txt(tmp_music: pathlib.Path) -> pathlib.Path:
    """Create a plain text file (no tag container)."""
    p = tmp_music / "notes.txt"
    p.write_text("not a song")
    return p
