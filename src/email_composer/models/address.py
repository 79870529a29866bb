"""Single mailbox address model.

Parses the three common forms of a mailbox::

    "Display Name" <local@domain>
    Display Name <local@domain>
    local@domain

and renders them back in a canonical form where the display name, if any,
is always quoted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from email_composer.exceptions import AddressSyntaxError
from email_composer.mime.headers import encode_words

_ATEXT = r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]"
_DOT_ATOM_RE = re.compile(rf"^{_ATEXT}+(?:\.{_ATEXT}+)*$")
_QUOTED_LOCAL_RE = re.compile(r'^"(?:[^"\\]|\\.)+"$')
_QUOTED_STRING_RE = re.compile(r'^"(?:[^"\\]|\\.)*"$')
_DOMAIN_RE = re.compile(
    r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)*$"
)
_DOMAIN_LITERAL_RE = re.compile(r"^\[[^\[\]\\\s]+\]$")


def _has_control_chars(text: str) -> bool:
    return any(ord(c) < 32 or ord(c) == 127 for c in text)


def _unquote(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text[1:-1])


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(frozen=True)
class Address:
    """An RFC 5322 mailbox: optional display name plus ``local@domain``."""

    local_part: str
    domain: str
    display_name: str | None = None

    def __post_init__(self) -> None:
        if not self.display_name:
            object.__setattr__(self, "display_name", None)
        raw = self.render()
        if self.display_name is not None and _has_control_chars(self.display_name):
            raise AddressSyntaxError(raw, "control characters in display name")
        _check_local_part(raw, self.local_part)
        _check_domain(raw, self.domain)

    @classmethod
    def parse(cls, text: str) -> Address:
        """Parse a mailbox string.

        Raises:
            AddressSyntaxError: If the text is not a syntactically valid mailbox.
        """
        if _has_control_chars(text):
            raise AddressSyntaxError(text, "control characters present")

        stripped = text.strip()
        display_name: str | None = None
        addr_spec = stripped

        if "<" in stripped or ">" in stripped:
            if not stripped.endswith(">"):
                raise AddressSyntaxError(text, "unbalanced angle brackets")
            start = stripped.rfind("<")
            if start == -1:
                raise AddressSyntaxError(text, "unbalanced angle brackets")
            addr_spec = stripped[start + 1 : -1].strip()
            display_name = _parse_display_name(text, stripped[:start].strip())
            if "<" in addr_spec or ">" in addr_spec:
                raise AddressSyntaxError(text, "unbalanced angle brackets")

        if "@" not in addr_spec:
            raise AddressSyntaxError(text, "missing '@'")
        local_part, domain = addr_spec.rsplit("@", 1)
        if not local_part:
            raise AddressSyntaxError(text, "empty local part")
        if not domain:
            raise AddressSyntaxError(text, "empty domain")

        return cls(local_part=local_part, domain=domain, display_name=display_name)

    @classmethod
    def parse_list(cls, text: str) -> tuple[Address, ...]:
        """Parse a comma-separated address list such as a ``To`` header value.

        Commas inside quoted display names or angle brackets do not split.

        Raises:
            AddressSyntaxError: If any entry is malformed or the list is empty.
        """
        entries = [entry for entry in _split_list(text) if entry.strip()]
        if not entries:
            raise AddressSyntaxError(text, "empty address list")
        return tuple(cls.parse(entry) for entry in entries)

    @property
    def addr_spec(self) -> str:
        return f"{self.local_part}@{self.domain}"

    def render(self) -> str:
        """Canonical text form, the inverse of :meth:`parse`."""
        if self.display_name:
            return f"{_quote(self.display_name)} <{self.addr_spec}>"
        return self.addr_spec

    def header_value(self) -> str:
        """Form used inside a header line; non-ASCII names become encoded words."""
        if self.display_name and not self.display_name.isascii():
            return f"{encode_words(self.display_name)} <{self.addr_spec}>"
        return self.render()

    def __str__(self) -> str:
        return self.render()


def _parse_display_name(text: str, raw: str) -> str | None:
    if not raw:
        return None
    if raw.startswith('"'):
        if not _QUOTED_STRING_RE.match(raw):
            raise AddressSyntaxError(text, "unterminated quoted display name")
        return _unquote(raw) or None
    if '"' in raw or "<" in raw or ">" in raw:
        raise AddressSyntaxError(text, "unbalanced angle brackets or quotes in display name")
    return raw


def _check_local_part(raw: str, local_part: str) -> None:
    if not local_part:
        raise AddressSyntaxError(raw, "empty local part")
    if _has_control_chars(local_part):
        raise AddressSyntaxError(raw, "control characters in local part")
    if _DOT_ATOM_RE.match(local_part) or _QUOTED_LOCAL_RE.match(local_part):
        return
    raise AddressSyntaxError(raw, f"invalid local part {local_part!r}")


def _check_domain(raw: str, domain: str) -> None:
    if not domain:
        raise AddressSyntaxError(raw, "empty domain")
    if _DOMAIN_RE.match(domain) or _DOMAIN_LITERAL_RE.match(domain):
        return
    raise AddressSyntaxError(raw, f"invalid domain {domain!r}")


def _split_list(text: str) -> list[str]:
    entries = []
    current: list[str] = []
    in_quotes = escaped = False
    depth = 0
    for char in text:
        if escaped:
            escaped = False
        elif char == "\\" and in_quotes:
            escaped = True
        elif char == '"':
            in_quotes = not in_quotes
        elif not in_quotes and char == "<":
            depth += 1
        elif not in_quotes and char == ">":
            depth = max(0, depth - 1)
        elif char == "," and not in_quotes and not depth:
            entries.append("".join(current))
            current = []
            continue
        current.append(char)
    entries.append("".join(current))
    return entries
