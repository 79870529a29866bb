"""RFC 5322 serialization of :class:`~email_composer.models.Message` values.

Header order is fixed regardless of how the message was built::

    From, To, Cc, Subject, Date, Message-ID, Reply-To,
    Mime-Version, Content-Type[, Content-Transfer-Encoding],
    <additional headers in insertion order>

``Bcc`` is never written. Every header line and the header/body separator
end in CRLF; body renderers are responsible for CRLF inside the body.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from email_composer.exceptions import InvalidHeaderError
from email_composer.mime.body_part import BodyPart
from email_composer.mime.headers import CRLF, encode_words, find_header, fold_header
from email_composer.models.address import Address
from email_composer.mime.content_type import TransferEncoding
from email_composer.providers import EntropySource, SystemEntropy, random_token

if TYPE_CHECKING:
    from email_composer.models.message import Message

logger = structlog.get_logger()

DEFAULT_FOLD_WIDTH = 78

_MSG_ID_RE = re.compile(r"^<[^<>@\s]+@[^<>@\s]+>$")


def format_date(value: datetime) -> str:
    """RFC 5322 date-time with a numeric offset, e.g. ``Mon, 02 Jan 2006 15:04:05 -0700``.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value)


def generate_message_id(sender: Address, entropy: EntropySource | None = None) -> str:
    """``<128-bit-hex-token@sender-domain>``."""
    entropy = entropy or SystemEntropy()
    return f"<{random_token(entropy, 16)}@{sender.domain}>"


def normalize_message_id(value: str) -> str:
    """Wrap a bare ``token@domain`` in angle brackets and validate it."""
    value = value.strip()
    if not value.startswith("<") and not value.endswith(">"):
        value = f"<{value}>"
    if not _MSG_ID_RE.match(value):
        raise InvalidHeaderError(f"Invalid Message-ID: {value!r}")
    return value


def _address_list(addresses: tuple[Address, ...] | None) -> str | None:
    if not addresses:
        return None
    return ", ".join(address.header_value() for address in addresses)


def _standard_headers(message: Message) -> list[tuple[str, str | None]]:
    body = message.body
    transfer_encoding = None
    if isinstance(body, BodyPart) and body.transfer_encoding is not TransferEncoding.SEVEN_BIT:
        transfer_encoding = body.transfer_encoding.value

    return [
        ("From", message.from_.header_value()),
        ("To", _address_list(message.to)),
        ("Cc", _address_list(message.cc)),
        ("Subject", encode_words(message.subject)),
        ("Date", format_date(message.date)),
        ("Message-ID", message.message_id),
        ("Reply-To", message.reply_to.header_value() if message.reply_to else None),
        ("Mime-Version", message.mime_version),
        ("Content-Type", body.content_type.header_value()),
        ("Content-Transfer-Encoding", transfer_encoding),
    ]


_ADDRESS_FIELDS = {"from", "to", "cc", "reply-to"}


def override_value(name: str, value: str) -> str:
    """Header text for an additional header, re-parsing address fields.

    Address overrides are rendered mailbox by mailbox so a non-ASCII
    display name is encoded without swallowing the angle address.

    Raises:
        AddressSyntaxError: If an address field override is malformed.
    """
    if name.lower() in _ADDRESS_FIELDS:
        return ", ".join(address.header_value() for address in Address.parse_list(value))
    return encode_words(value)


def header_lines(message: Message) -> list[tuple[str, str]]:
    """Ordered ``(name, value)`` pairs exactly as they will be written.

    An additional header named like a standard field replaces that field's
    value in place; ``Bcc`` entries are dropped.
    """
    standard = _standard_headers(message)
    reserved = {name.lower() for name, _ in standard} | {"bcc"}

    lines = []
    for name, value in standard:
        override = find_header(message.additional_headers, name)
        if override is not None:
            value = override_value(name, override)
        if value is not None:
            lines.append((name, value))

    for name, value in message.additional_headers.items():
        if name.lower() not in reserved:
            lines.append((name, encode_words(value)))
    return lines


def render_body(message: Message) -> str:
    body = message.body
    if isinstance(body, BodyPart):
        return body.encoded_content()
    return body.render()


def render_body_bytes(message: Message) -> bytes:
    body = message.body
    if isinstance(body, BodyPart):
        return body.encoded_bytes()
    return body.render_bytes()


def render_header_block(message: Message, *, fold_width: int = DEFAULT_FOLD_WIDTH) -> str:
    """Folded header lines followed by the blank separator line."""
    lines = (fold_header(name, value, fold_width) + CRLF for name, value in header_lines(message))
    return "".join(lines) + CRLF


def render_message(message: Message, *, fold_width: int = DEFAULT_FOLD_WIDTH) -> str:
    """Render the complete message as text: header block, blank line, body.

    Body parts are decoded with their own charset; use
    :func:`message_to_bytes` for the exact wire form.
    """
    rendered = render_header_block(message, fold_width=fold_width) + render_body(message)
    logger.debug(
        "message_rendered",
        message_id=message.message_id,
        length=len(rendered),
    )
    return rendered


def message_to_bytes(message: Message, *, fold_width: int = DEFAULT_FOLD_WIDTH) -> bytes:
    """Wire form of the message.

    The header block is encoded as UTF-8; body bytes are copied unchanged
    in the charset each part declares.
    """
    header_block = render_header_block(message, fold_width=fold_width).encode("utf-8")
    return header_block + render_body_bytes(message)


def write_eml(message: Message, path: Path, *, fold_width: int = DEFAULT_FOLD_WIDTH) -> Path:
    """Write the message to ``path`` as an ``.eml`` file.

    Args:
        message: Message to serialize.
        path: Destination file; parent directories are created.
        fold_width: Header folding column.

    Returns:
        Path: The written file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = message_to_bytes(message, fold_width=fold_width)
    path.write_bytes(data)
    logger.info("eml_written", path=str(path), size=len(data), message_id=message.message_id)
    return path
