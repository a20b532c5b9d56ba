"""Decode the HTML character references WordPress leaves in titles and bodies."""

from __future__ import annotations

import re

__all__ = ["NAMED_ENTITIES", "decode_entities"]

NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": "\u00a0",
    "lsquo": "‘",
    "rsquo": "’",
    "sbquo": "‚",
    "ldquo": "“",
    "rdquo": "”",
    "bdquo": "„",
    "ndash": "–",
    "mdash": "—",
    "hellip": "…",
    "laquo": "«",
    "raquo": "»",
    "copy": "©",
    "reg": "®",
    "trade": "™",
    "deg": "°",
    "middot": "·",
    "bull": "•",
    "times": "×",
    "eacute": "é",
}

# One pass over the text: the output of a replacement is never re-scanned, so
# "&amp;rsquo;" becomes "&rsquo;" and stops there.
_REFERENCE_RE = re.compile(r"&(#[^;\s&]{1,10}|[A-Za-z][A-Za-z0-9]{1,31});")

_MAX_CODE_POINT = 0x10FFFF


def _decode_numeric(body: str) -> str | None:
    digits = body[1:]
    try:
        if digits[:1] in ("x", "X"):
            code = int(digits[1:], 16)
        else:
            if not digits.isdigit():
                return None
            code = int(digits)
    except ValueError:
        return None
    if code <= 0 or code > _MAX_CODE_POINT:
        return None
    if 0xD800 <= code <= 0xDFFF:
        return None
    return chr(code)


def _replace(match: re.Match) -> str:
    body = match.group(1)
    if body.startswith("#"):
        decoded = _decode_numeric(body)
    else:
        decoded = NAMED_ENTITIES.get(body)
    return match.group(0) if decoded is None else decoded


def decode_entities(text: str | None) -> str:
    """Replace known named and numeric references with literal characters.

    Unknown names and malformed numeric references (``&#abc;``, code points
    outside the Unicode range) are kept verbatim.
    """

    if not text:
        return ""
    if "&" not in text:
        return text
    return _REFERENCE_RE.sub(_replace, text)
