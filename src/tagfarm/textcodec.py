"""Decoding of ID3v2 text-information frame payloads.

The first payload byte names the text encoding:

    0x00  ISO-8859-1
    0x01  UTF-16, usually with a byte order mark
    0x02  UTF-16BE without a byte order mark (ID3v2.4)
    0x03  UTF-8 (ID3v2.4)

Reading 0x03 as UTF-8 departs from the older rule that any nonzero encoding
byte means UTF-16. Every other nonzero value still goes through the UTF-16
path. A UTF-16 payload without a byte order mark is read as big-endian,
which is what the ID3v2.4 encoding 0x02 prescribes and what Unicode assumes
for unmarked UTF-16.

Only the first string of a frame is returned: decoding stops at the first
NUL character (or NUL code unit for UTF-16), so multi-value v2.4 frames
yield their first value.
"""

from __future__ import annotations

ENCODING_LATIN1 = 0x00
ENCODING_UTF8 = 0x03

BOM_LE = b"\xff\xfe"
BOM_BE = b"\xfe\xff"

_NUL_UNIT = b"\x00\x00"


def _cut_at_nul(data: bytes) -> bytes:
    idx = data.find(b"\x00")
    return data if idx == -1 else data[:idx]


def _cut_at_nul_unit(data: bytes) -> bytes:
    """Truncate to whole 16-bit units, ending before the first NUL unit."""
    end = len(data) - len(data) % 2
    for i in range(0, end, 2):
        if data[i:i + 2] == _NUL_UNIT:
            return data[:i]
    return data[:end]


def detect_byte_order(data: bytes) -> tuple[str, int]:
    """Return (codec name, bytes consumed) for a possible BOM at the start of *data*."""
    if data[:2] == BOM_LE:
        return "utf-16-le", 2
    if data[:2] == BOM_BE:
        return "utf-16-be", 2
    return "utf-16-be", 0


def decode_utf16(data: bytes) -> str:
    """Decode UTF-16 text following the encoding byte of a frame.

    Handles the byte order mark and the leading NUL unit some encoders emit
    before the text. Valid surrogate pairs combine into one code point; lone
    surrogates are replaced with U+FFFD.
    """
    codec, consumed = detect_byte_order(data)
    data = data[consumed:]
    if data[:2] == _NUL_UNIT:
        data = data[2:]
    units = _cut_at_nul_unit(data)
    return units.decode(codec, errors="replace")


def decode_text_frame(payload: bytes) -> str | None:
    """Decode the text of a text-information frame.

    Returns None when the payload holds no characters, so that an empty
    frame leaves the corresponding tag field unset.
    """
    if not payload:
        return None

    encoding = payload[0]
    if encoding == ENCODING_LATIN1:
        text = _cut_at_nul(payload[1:]).decode("latin-1")
    elif encoding == ENCODING_UTF8:
        text = _cut_at_nul(payload[1:]).decode("utf-8", errors="replace")
    else:
        if len(payload) < 3:
            return None
        text = decode_utf16(payload[1:])

    return text or None
