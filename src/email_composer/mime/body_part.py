"""Leaf MIME entities and their transfer encodings (RFC 2045)."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from email_composer.mime.headers import CRLF
from email_composer.mime.content_type import ContentType, TransferEncoding, text_content_type

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_LINE_BREAK_BYTES_RE = re.compile(rb"\r\n|\r|\n")


def normalize_line_endings(text: str) -> str:
    """Convert every line break style to CRLF."""
    return _LINE_BREAK_RE.sub(CRLF, text)


def encode_quoted_printable(data: bytes) -> str:
    """Quoted-printable with 76-column soft line breaks and CRLF line endings."""
    encoded = binascii.b2a_qp(data, quotetabs=False, istext=True, header=False)
    return normalize_line_endings(encoded.decode("ascii"))


def encode_base64(data: bytes) -> str:
    """Base64 in 76-column lines joined by CRLF."""
    lines = base64.encodebytes(data).decode("ascii").splitlines()
    return CRLF.join(lines)


@dataclass(frozen=True)
class BodyPart:
    """A single MIME leaf: media type, transfer encoding and raw bytes."""

    content_type: ContentType
    transfer_encoding: TransferEncoding
    raw_content: bytes

    @classmethod
    def text(
        cls,
        content: str,
        subtype: str = "plain",
        charset: str = "UTF-8",
        transfer_encoding: TransferEncoding = TransferEncoding.SEVEN_BIT,
    ) -> BodyPart:
        """Build a ``text/<subtype>`` part from a string."""
        return cls(
            content_type=text_content_type(subtype, charset),
            transfer_encoding=TransferEncoding(transfer_encoding),
            raw_content=content.encode(charset),
        )

    @classmethod
    def html(
        cls,
        content: str,
        charset: str = "UTF-8",
        transfer_encoding: TransferEncoding = TransferEncoding.SEVEN_BIT,
    ) -> BodyPart:
        return cls.text(content, "html", charset, transfer_encoding)

    @property
    def charset(self) -> str:
        return self.content_type.charset or "UTF-8"

    @property
    def content(self) -> str:
        """The raw content decoded with the part's charset."""
        return self.raw_content.decode(self.charset, errors="replace")

    def encoded_bytes(self) -> bytes:
        """Transport form of the content, with CRLF line endings.

        ``7bit`` performs no transformation apart from line-ending
        normalisation, so the bytes stay in the declared charset; keeping
        them 7-bit clean is the caller's concern.
        """
        if self.transfer_encoding is TransferEncoding.QUOTED_PRINTABLE:
            return encode_quoted_printable(self.raw_content).encode("ascii")
        if self.transfer_encoding is TransferEncoding.BASE64:
            return encode_base64(self.raw_content).encode("ascii")
        return _LINE_BREAK_BYTES_RE.sub(CRLF.encode("ascii"), self.raw_content)

    def encoded_content(self) -> str:
        """Text view of :meth:`encoded_bytes`, decoded with the part's charset."""
        return self.encoded_bytes().decode(self.charset, errors="replace")

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": self.content_type.header_value(),
            "Content-Transfer-Encoding": self.transfer_encoding.value,
        }

    def header_block(self) -> str:
        lines = [f"{name}: {value}" for name, value in self.headers().items()]
        return CRLF.join(lines) + CRLF + CRLF

    def render(self) -> str:
        return self.header_block() + self.encoded_content()

    def render_bytes(self) -> bytes:
        """Wire form of the part; the content keeps its declared charset."""
        return self.header_block().encode("utf-8") + self.encoded_bytes()
