"""Multipart entities (RFC 2046), chiefly ``multipart/alternative``."""

from __future__ import annotations

import base64
import re
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from email_composer.exceptions import InvalidMultipartError
from email_composer.mime.body_part import BodyPart
from email_composer.mime.headers import CRLF
from email_composer.mime.content_type import (
    TEXT_HTML_UTF8,
    TEXT_PLAIN_UTF8,
    ContentType,
    TransferEncoding,
    multipart_content_type,
)
from email_composer.providers import EntropySource, SystemEntropy

logger = structlog.get_logger()

# "=_" cannot occur in quoted-printable output, so it makes a safe prefix.
DEFAULT_BOUNDARY_PREFIX = "=_"

_BOUNDARY_RE = re.compile(r"^[0-9A-Za-z'()+_,\-./:=? ]{0,69}[0-9A-Za-z'()+_,\-./:=?]$")
_MAX_BOUNDARY_ATTEMPTS = 8
# 80 bits as 16 base32 characters keeps the Content-Type line of an
# Apple-Mail=_ boundary within 78 columns.
_BOUNDARY_TOKEN_BYTES = 10


def generate_boundary(
    entropy: EntropySource | None = None,
    prefix: str = DEFAULT_BOUNDARY_PREFIX,
) -> str:
    """Return ``prefix`` followed by 80 random bits in base32."""
    entropy = entropy or SystemEntropy()
    token = base64.b32encode(entropy.token_bytes(_BOUNDARY_TOKEN_BYTES))
    return prefix + token.decode("ascii")


@dataclass(frozen=True)
class Multipart:
    """A ``multipart/<subtype>`` entity owning an ordered, non-empty list of parts."""

    subtype: str
    boundary: str
    parts: tuple[BodyPart, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "parts", tuple(self.parts))
        if not self.parts:
            raise InvalidMultipartError("A multipart entity needs at least one part")
        if not _BOUNDARY_RE.match(self.boundary):
            raise InvalidMultipartError(f"Invalid multipart boundary: {self.boundary!r}")
        if _collides(self.boundary, self.parts):
            raise InvalidMultipartError(
                f"Boundary {self.boundary!r} occurs inside the content of a part"
            )

    @classmethod
    def create(
        cls,
        subtype: str,
        parts: Sequence[BodyPart],
        boundary: str | None = None,
        *,
        entropy: EntropySource | None = None,
        boundary_prefix: str = DEFAULT_BOUNDARY_PREFIX,
    ) -> Multipart:
        """Build a multipart entity, generating a boundary when none is given.

        A generated boundary that happens to occur in the content is drawn
        again; a caller-supplied one that collides is rejected.

        Raises:
            InvalidMultipartError: If ``parts`` is empty or the boundary is unusable.
        """
        if not parts:
            raise InvalidMultipartError("A multipart entity needs at least one part")

        if boundary is None:
            boundary = generate_boundary(entropy, boundary_prefix)
            attempts = 1
            while _collides(boundary, parts):
                if attempts >= _MAX_BOUNDARY_ATTEMPTS:
                    raise InvalidMultipartError("Could not generate a non-colliding boundary")
                logger.warning("boundary_collision_regenerated", attempt=attempts)
                boundary = generate_boundary(entropy, boundary_prefix)
                attempts += 1

        multipart = cls(subtype=subtype.lower(), boundary=boundary, parts=tuple(parts))
        logger.debug(
            "multipart_built",
            subtype=multipart.subtype,
            part_count=len(multipart.parts),
            boundary=multipart.boundary,
        )
        return multipart

    @property
    def content_type(self) -> ContentType:
        return multipart_content_type(self.subtype, self.boundary)

    def render(self) -> str:
        """Delimited body: each part after ``--boundary``, closed by ``--boundary--``."""
        delimiter = f"--{self.boundary}"
        chunks = [f"{delimiter}{CRLF}{part.render()}{CRLF}" for part in self.parts]
        return "".join(chunks) + f"{delimiter}--{CRLF}"

    def render_bytes(self) -> bytes:
        """Wire form of :meth:`render`, keeping each part in its own charset."""
        delimiter = f"--{self.boundary}".encode("ascii")
        crlf = CRLF.encode("ascii")
        chunks = [delimiter + crlf + part.render_bytes() + crlf for part in self.parts]
        return b"".join(chunks) + delimiter + b"--" + crlf


def _collides(boundary: str, parts: Sequence[BodyPart]) -> bool:
    marker = boundary.encode("ascii")
    return any(marker in part.render_bytes() for part in parts)


def build_alternative(
    text_content: str,
    html_content: str,
    boundary: str | None = None,
    *,
    entropy: EntropySource | None = None,
    boundary_prefix: str = DEFAULT_BOUNDARY_PREFIX,
) -> Multipart:
    """Plain text first, HTML second, both ``7bit`` UTF-8.

    Clients pick the last part they can display, so HTML-capable readers
    show the HTML while others fall back to the plain text.
    """
    parts = [
        BodyPart(TEXT_PLAIN_UTF8, TransferEncoding.SEVEN_BIT, text_content.encode("utf-8")),
        BodyPart(TEXT_HTML_UTF8, TransferEncoding.SEVEN_BIT, html_content.encode("utf-8")),
    ]
    return Multipart.create(
        "alternative",
        parts,
        boundary,
        entropy=entropy,
        boundary_prefix=boundary_prefix,
    )
