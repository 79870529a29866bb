"""Header-level helpers shared by the models and the serializer.

Covers header-name validation, case-insensitive merging of extension
headers, RFC 2047 encoded words for non-ASCII text and RFC 5322 folding.
"""

from __future__ import annotations

import base64
import re
from collections.abc import Iterable, Mapping

from email_composer.exceptions import InvalidHeaderError

CRLF = "\r\n"

# RFC 5322 ftext: printable US-ASCII except colon.
_HEADER_NAME_RE = re.compile(r"^[\x21-\x39\x3b-\x7e]+$")

# An encoded word may be at most 75 characters; "=?utf-8?b?" + "?=" is 12.
_MAX_ENCODED_CHUNK = 45


def validate_header_name(name: str) -> str:
    if not _HEADER_NAME_RE.match(name):
        raise InvalidHeaderError(f"Invalid header name: {name!r}")
    return name


def validate_header_value(name: str, value: str) -> str:
    if "\r" in value or "\n" in value:
        raise InvalidHeaderError(f"Header {name!r} must not contain line breaks")
    return value


def validate_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Validate every entry and collapse case-insensitive duplicates.

    The last spelling of a duplicated name wins, at the position of its
    first occurrence.
    """
    return merge_headers({}, headers)


def find_header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive lookup."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def merge_headers(base: Mapping[str, str], patch: Mapping[str, str]) -> dict[str, str]:
    """Return ``base`` overlaid with ``patch``.

    Keys are compared case-insensitively. An overwritten entry keeps its
    position but takes the spelling used in ``patch``; new entries are
    appended in ``patch`` order. Neither input is modified.
    """
    merged: dict[str, str] = {}
    positions: dict[str, str] = {}
    for key, value in list(base.items()) + list(patch.items()):
        validate_header_name(key)
        validate_header_value(key, value)
        existing = positions.get(key.lower())
        if existing is None:
            merged[key] = value
        else:
            merged = {
                (key if k == existing else k): (value if k == existing else v)
                for k, v in merged.items()
            }
        positions[key.lower()] = key
    return merged


def without_headers(headers: Mapping[str, str], names: Iterable[str]) -> dict[str, str]:
    dropped = {n.lower() for n in names}
    return {k: v for k, v in headers.items() if k.lower() not in dropped}


def encode_words(text: str) -> str:
    """Encode ``text`` as RFC 2047 ``B`` encoded words when it is not ASCII.

    Chunks never split a multi-byte character. Words are separated by a
    single space, which decoders discard between adjacent encoded words.
    """
    if text.isascii():
        return text

    words = []
    chunk = b""
    for char in text:
        encoded = char.encode("utf-8")
        if chunk and len(chunk) + len(encoded) > _MAX_ENCODED_CHUNK:
            words.append(_encoded_word(chunk))
            chunk = b""
        chunk += encoded
    if chunk:
        words.append(_encoded_word(chunk))
    return " ".join(words)


def _encoded_word(chunk: bytes) -> str:
    return "=?utf-8?b?" + base64.b64encode(chunk).decode("ascii") + "?="


def fold_header(name: str, value: str, width: int = 78) -> str:
    """Render ``name: value`` folded at whitespace to at most ``width`` columns.

    Folding only happens before an existing space, so tokens (addresses,
    boundaries, encoded words) are never split; a single token longer than
    ``width`` is left on an overlong line. ``width <= 0`` disables folding.
    The returned text has no trailing CRLF.
    """
    line = f"{name}: {value}"
    if width <= 0 or len(line) <= width:
        return line

    words = value.split(" ")
    lines = []
    current = f"{name}: {words[0]}"
    for word in words[1:]:
        if word and current.strip() and len(current) + 1 + len(word) > width:
            lines.append(current)
            current = " " + word
        else:
            current += " " + word
    lines.append(current)
    return CRLF.join(lines)
