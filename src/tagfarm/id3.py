"""ID3v2 tag container decoding (versions 2.2, 2.3 and 2.4)."""

from __future__ import annotations

from dataclasses import dataclass
from tagfarm.tags import TagRecord
from tagfarm.textcodec import decode_text_frame
from typing import BinaryIO
from typing import Callable
from typing import Iterator

import logging
import re


logger = logging.getLogger(__name__)

HEADER_SIZE = 10
MAGIC = b"ID3"


class FrameError(Exception):
    """A frame could not be read; frame iteration stops at this point."""


class CorruptFrame(FrameError):
    """Frame header with a non-alphanumeric id or an impossible size."""


class TruncatedStream(FrameError):
    """The stream ended before a declared frame header or payload."""


def syncsafe(data: bytes) -> int:
    """Decode a big-endian integer stored as 7 bits per byte.

    The high bit of each byte is not masked off: plenty of writers ignore it,
    so the result is an upper bound to check against the bytes actually
    available.
    """
    n = 0
    for i, b in enumerate(data):
        n |= b << (len(data) - i - 1) * 7
    return n


def _plain_int(data: bytes) -> int:
    return int.from_bytes(data, "big")


@dataclass(frozen=True)
class TagHeader:
    """The fixed 10-byte header at the start of an ID3v2 tag."""

    major_version: int
    minor_version: int
    unsynchronized: bool
    has_extended_header: bool
    experimental: bool
    has_footer: bool
    body_length: int


@dataclass(frozen=True)
class FrameLayout:
    """Frame header geometry for one ID3v2 major version."""

    header_size: int
    id_width: int
    size_width: int
    decode_size: Callable[[bytes], int]


FRAME_LAYOUTS: dict[int, FrameLayout] = {
    2: FrameLayout(header_size=6, id_width=3, size_width=3, decode_size=_plain_int),
    3: FrameLayout(header_size=10, id_width=4, size_width=4, decode_size=_plain_int),
    4: FrameLayout(header_size=10, id_width=4, size_width=4, decode_size=syncsafe),
}


@dataclass
class Frame:
    """One frame: identifier, declared payload size and the raw payload."""

    id: str
    declared_size: int
    payload: bytes


# v2.2 identifiers for the frames we map, keyed to their v2.3+ names
_V2_FRAME_IDS = {
    "TT2": "TIT2",
    "TP1": "TPE1",
    "TAL": "TALB",
    "TRK": "TRCK",
}

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)", re.ASCII)


def parse_header(stream: BinaryIO) -> TagHeader | None:
    """Read the tag header at the current stream position.

    Returns None, with the stream moved back to where it was, when there is
    no ID3v2 tag here.
    """
    start = stream.tell()
    buf = stream.read(HEADER_SIZE)
    if len(buf) < HEADER_SIZE or buf[:3] != MAGIC:
        stream.seek(start)
        return None

    flags = buf[5]
    return TagHeader(
        major_version=buf[3],
        minor_version=buf[4],
        unsynchronized=bool(flags & 0x80),
        has_extended_header=bool(flags & 0x40),
        experimental=bool(flags & 0x20),
        has_footer=bool(flags & 0x10),
        body_length=syncsafe(buf[6:10]),
    )


def read_frame(stream: BinaryIO, layout: FrameLayout, remaining: int) -> Frame:
    """Read one frame header and its payload.

    Raises CorruptFrame or TruncatedStream when no trustworthy frame can be
    read; the caller stops iterating in either case.
    """
    header = stream.read(layout.header_size)
    if len(header) < layout.header_size:
        raise TruncatedStream(f"frame header: expected {layout.header_size} bytes, got {len(header)}")

    raw_id = header[:layout.id_width]
    if not raw_id.isalnum():
        if not any(header):
            raise CorruptFrame("reached padding")
        raise CorruptFrame(f"invalid frame id {raw_id!r}")

    size_field = header[layout.id_width:layout.id_width + layout.size_width]
    size = layout.decode_size(size_field)
    if size > remaining:
        raise CorruptFrame(f"frame {raw_id.decode('ascii')} size {size} exceeds remaining {remaining}")

    payload = stream.read(size)
    if len(payload) < size:
        raise TruncatedStream(f"frame {raw_id.decode('ascii')}: expected {size} bytes, got {len(payload)}")

    return Frame(id=raw_id.decode("ascii"), declared_size=size, payload=payload)


def iter_frames(stream: BinaryIO, header: TagHeader) -> Iterator[Frame]:
    """Yield frames until the declared body is used up or a frame is bad."""
    layout = FRAME_LAYOUTS[header.major_version]
    remaining = header.body_length
    while remaining > layout.header_size:
        try:
            frame = read_frame(stream, layout, remaining)
        except FrameError as e:
            logger.debug(f"stopping frame iteration: {e}")
            return
        if frame.declared_size == 0:
            return
        remaining -= layout.header_size + frame.declared_size
        yield frame


def normalize_frame_id(frame_id: str, major_version: int) -> str:
    """Map the v2.2 identifiers we use to their four-character names."""
    if major_version == 2:
        return _V2_FRAME_IDS.get(frame_id, frame_id)
    return frame_id


def parse_leading_int(text: str) -> int:
    """Parse a leading base-10 integer like C's atoi: '7/12' -> 7, 'x' -> 0."""
    m = _LEADING_INT_RE.match(text)
    if m is None:
        return 0
    return int(m.group(1))


def apply_frame(record: TagRecord, frame_id: str, text: str | None) -> None:
    """Store decoded frame text in the matching record field."""
    if text is None:
        return
    if frame_id == "TIT2":
        record.title = text
    elif frame_id == "TPE1":
        record.artist = text
    elif frame_id == "TALB":
        record.album = text
    elif frame_id == "TRCK":
        record.track = parse_leading_int(text)
    elif frame_id == "TPOS":
        record.disk = parse_leading_int(text)
        if "/" in text:
            record.total_disks = parse_leading_int(text.split("/", 1)[1])


def parse_tags(stream: BinaryIO) -> TagRecord | None:
    """Decode the ID3v2 tag at the current stream position.

    Returns None when there is no tag (stream rewound). A tag that carries
    no usable frames still produces a TagRecord, with every field unset.
    """
    header = parse_header(stream)
    if header is None:
        return None

    record = TagRecord()

    # extended headers are rare enough in the wild not to bother
    if header.has_extended_header:
        logger.debug("skipping tag with extended header")
        return record

    if header.major_version not in FRAME_LAYOUTS:
        logger.debug(f"unsupported ID3v2.{header.major_version} tag")
        return record

    for frame in iter_frames(stream, header):
        frame_id = normalize_frame_id(frame.id, header.major_version)
        if not frame_id.startswith("T"):
            continue
        apply_frame(record, frame_id, decode_text_frame(frame.payload))

    return record


class ID3Prober:
    """Tag prober for ID3v2 containers."""

    def try_parse(self, stream: BinaryIO) -> TagRecord | None:
        return parse_tags(stream)
