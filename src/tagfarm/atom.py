"""MP4/M4A atom metadata via mutagen, tried when a file has no ID3v2 tag."""

from __future__ import annotations

from mutagen import MutagenError
from mutagen.mp4 import MP4
from mutagen.mp4 import MP4Tags
from tagfarm.tags import TagRecord
from typing import BinaryIO

import logging


logger = logging.getLogger(__name__)

ATOM_HEADER_SIZE = 0x20
FTYP = b"ftyp"

# iTunes-style atom names
_TEXT_ATOMS = {
    "\xa9ART": "artist",
    "\xa9alb": "album",
    "\xa9nam": "title",
}


def is_atom_container(stream: BinaryIO) -> bool:
    """Check for an ``ftyp`` atom at the current position, leaving the stream untouched."""
    start = stream.tell()
    buf = stream.read(ATOM_HEADER_SIZE)
    stream.seek(start)
    return len(buf) >= ATOM_HEADER_SIZE and buf[4:8] == FTYP


def _first(tags: MP4Tags, key: str) -> str | tuple[int, int] | None:
    values = tags.get(key)
    if not values:
        return None
    return values[0]


def record_from_mp4_tags(tags: MP4Tags | None) -> TagRecord:
    """Map mutagen MP4 tags onto a TagRecord."""
    record = TagRecord()
    if tags is None:
        return record

    for key, field_name in _TEXT_ATOMS.items():
        value = _first(tags, key)
        if value:
            setattr(record, field_name, str(value))

    # trkn/disk hold (number, total) pairs
    trkn = _first(tags, "trkn")
    if trkn:
        record.track = trkn[0]

    disk = _first(tags, "disk")
    if disk:
        record.disk = disk[0]
        if len(disk) > 1 and disk[1]:
            record.total_disks = disk[1]

    return record


class AtomProber:
    """Tag prober for MP4 atom containers."""

    def try_parse(self, stream: BinaryIO) -> TagRecord | None:
        if not is_atom_container(stream):
            return None

        start = stream.tell()
        try:
            mp4 = MP4(stream)
        except MutagenError as e:
            logger.debug(f"unreadable MP4 metadata: {e}")
            return TagRecord()
        finally:
            stream.seek(start)

        return record_from_mp4_tags(mp4.tags)
