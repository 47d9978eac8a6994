"""Tests for tagfarm.tags — the tag record and the prober chain."""

import io

from tagfarm.atom import AtomProber
from tagfarm.id3 import ID3Prober
from tagfarm.tags import probe
from tagfarm.tags import TagRecord


class _Never:
    def try_parse(self, stream):
        return None


class _Always:
    def __init__(self, record):
        self.record = record
        self.calls = 0

    def try_parse(self, stream):
        self.calls += 1
        return self.record


class TestTagRecord:
    """Test the TagRecord dataclass itself."""

    def test_defaults(self):
        r = TagRecord()
        assert r.artist is None
        assert r.album is None
        assert r.title is None
        assert r.track is None
        assert r.disk is None
        assert r.total_disks is None
        assert r.is_empty

    def test_any_field_makes_it_non_empty(self):
        assert not TagRecord(track=0).is_empty
        assert not TagRecord(title="x").is_empty


class TestProbe:
    """Test ordered fallback between probers."""

    def test_first_match_wins(self):
        second = _Always(TagRecord(title="second"))
        record = probe(io.BytesIO(b""), [_Always(TagRecord(title="first")), second])
        assert record.title == "first"
        assert second.calls == 0

    def test_falls_back(self):
        record = probe(io.BytesIO(b""), [_Never(), _Always(TagRecord(album="B"))])
        assert record.album == "B"

    def test_empty_record_counts_as_match(self):
        fallback = _Always(TagRecord(title="fallback"))
        record = probe(io.BytesIO(b""), [_Always(TagRecord()), fallback])
        assert record == TagRecord()
        assert fallback.calls == 0

    def test_nothing_matches(self):
        assert probe(io.BytesIO(b""), [_Never(), _Never()]) is None

    def test_no_probers(self):
        assert probe(io.BytesIO(b""), []) is None

    def test_id3_then_atom_on_plain_bytes(self):
        stream = io.BytesIO(b"just some bytes, neither ID3 nor an MP4 file")
        assert probe(stream, [ID3Prober(), AtomProber()]) is None
        assert stream.tell() == 0
