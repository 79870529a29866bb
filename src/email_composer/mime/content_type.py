"""MIME media types and transfer encodings (RFC 2045)."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from email_composer.exceptions import InvalidHeaderError

# RFC 2045 tspecials plus whitespace force a parameter value to be quoted.
_NEEDS_QUOTING_RE = re.compile(r'[()<>@,;:\\"/\[\]?=\s]')
_TOKEN_RE = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z-]+$")
_PARAM_RE = re.compile(r'\s*([^=\s;]+)\s*=\s*("(?:[^"\\]|\\.)*"|[^;]*)')

# The boundary is always quoted so that receivers never tokenize it.
_ALWAYS_QUOTED = {"boundary"}


class TransferEncoding(str, Enum):
    """Content-Transfer-Encoding mechanisms."""

    SEVEN_BIT = "7bit"
    QUOTED_PRINTABLE = "quoted-printable"
    BASE64 = "base64"


def _quote_value(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(frozen=True, eq=False)
class ContentType:
    """A media type such as ``text/plain; charset=UTF-8``.

    Parameter names are case-insensitive and unique; they are kept in
    insertion order for rendering.
    """

    type: str
    subtype: str
    parameters: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for part in (self.type, self.subtype):
            if not _TOKEN_RE.match(part):
                raise InvalidHeaderError(f"Invalid media type token: {part!r}")
        seen: dict[str, tuple[str, str]] = {}
        for name, value in self.parameters:
            if not _TOKEN_RE.match(name):
                raise InvalidHeaderError(f"Invalid parameter name: {name!r}")
            if "\r" in value or "\n" in value:
                raise InvalidHeaderError(f"Parameter {name!r} must not contain line breaks")
            seen[name.lower()] = (name, value)
        object.__setattr__(self, "parameters", tuple(seen.values()))

    @classmethod
    def of(cls, mime_type: str, parameters: Mapping[str, str] | None = None) -> ContentType:
        """Build from ``"type/subtype"`` plus a parameter mapping."""
        if "/" not in mime_type:
            raise InvalidHeaderError(f"Media type must be 'type/subtype': {mime_type!r}")
        type_, subtype = mime_type.split("/", 1)
        return cls(type_.strip(), subtype.strip(), tuple((parameters or {}).items()))

    @classmethod
    def parse(cls, value: str) -> ContentType:
        """Parse a ``Content-Type`` header value."""
        mime_type, _, rest = value.partition(";")
        params = []
        for match in _PARAM_RE.finditer(rest):
            name, raw = match.group(1), match.group(2).strip()
            if raw.startswith('"') and raw.endswith('"') and len(raw) >= 2:
                raw = re.sub(r"\\(.)", r"\1", raw[1:-1])
            params.append((name, raw))
        return cls.of(mime_type, dict(params))

    @property
    def mime_type(self) -> str:
        return f"{self.type.lower()}/{self.subtype.lower()}"

    @property
    def charset(self) -> str | None:
        return self.get_parameter("charset")

    def get_parameter(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.parameters:
            if key.lower() == wanted:
                return value
        return None

    def with_parameter(self, name: str, value: str) -> ContentType:
        """Return a copy with ``name`` set, replacing any existing value."""
        params = [(k, v) for k, v in self.parameters if k.lower() != name.lower()]
        params.append((name, value))
        return ContentType(self.type, self.subtype, tuple(params))

    def header_value(self) -> str:
        rendered = [self.mime_type]
        for name, value in self.parameters:
            if name.lower() in _ALWAYS_QUOTED or not value or _NEEDS_QUOTING_RE.search(value):
                value = _quote_value(value)
            rendered.append(f"{name}={value}")
        return "; ".join(rendered)

    def _key(self) -> tuple[str, frozenset[tuple[str, str]]]:
        return self.mime_type, frozenset((k.lower(), v) for k, v in self.parameters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentType):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.header_value()


def text_content_type(subtype: str, charset: str = "UTF-8") -> ContentType:
    return ContentType("text", subtype, (("charset", charset),))


def multipart_content_type(subtype: str, boundary: str) -> ContentType:
    return ContentType("multipart", subtype, (("boundary", boundary),))


TEXT_PLAIN_UTF8 = text_content_type("plain")
TEXT_HTML_UTF8 = text_content_type("html")

