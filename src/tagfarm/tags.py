"""Decoded tag record and the chain of container probers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO
from typing import Iterable
from typing import Protocol

import logging


logger = logging.getLogger(__name__)


@dataclass
class TagRecord:
    """Descriptive metadata decoded from a single file's tag container."""

    artist: str | None = None
    album: str | None = None
    title: str | None = None
    track: int | None = None
    disk: int | None = None
    total_disks: int | None = None

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.artist, self.album, self.title, self.track, self.disk, self.total_disks)
        )


class TagProber(Protocol):
    """A tag container format that may be present at the start of a stream."""

    def try_parse(self, stream: BinaryIO) -> TagRecord | None:
        """Return the decoded record, or None when the format does not match.

        On None the stream is left at the offset it was passed in at, so the
        next prober sees the same bytes.
        """
        ...


def probe(stream: BinaryIO, probers: Iterable[TagProber]) -> TagRecord | None:
    """Try each prober in order and return the first record found."""
    for prober in probers:
        record = prober.try_parse(stream)
        if record is not None:
            logger.debug(f"{type(prober).__name__} matched")
            return record
    return None
