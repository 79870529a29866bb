"""RFC 5322 message model.

A :class:`Message` is built once and never mutated; deriving a variant
(for instance an Apple Mail draft) is done with :meth:`Message.with_headers`,
which returns a new value.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from email_composer.mime.body_part import BodyPart
from email_composer.mime.headers import merge_headers, validate_header_value, validate_headers
from email_composer.mime.multipart import Multipart
from email_composer.mime.serializer import (
    DEFAULT_FOLD_WIDTH,
    generate_message_id,
    message_to_bytes,
    normalize_message_id,
    override_value,
    render_message,
    write_eml,
)
from email_composer.models.address import Address
from email_composer.providers import Clock, EntropySource, SystemClock

logger = structlog.get_logger()

AddressLike = Address | str


def to_address(value: AddressLike) -> Address:
    """Return ``value`` as an :class:`Address`, parsing strings."""
    if isinstance(value, Address):
        return value
    return Address.parse(value)


def to_addresses(values: Sequence[AddressLike] | AddressLike | None) -> tuple[Address, ...] | None:
    if values is None:
        return None
    if isinstance(values, (str, Address)):
        values = [values]
    return tuple(to_address(v) for v in values)


class Message(BaseModel):
    """An immutable email message ready to be serialized."""

    model_config = ConfigDict(frozen=True)

    from_: Address = Field(description="Sender mailbox")
    to: tuple[Address, ...] = Field(default=(), description="Primary recipients")
    cc: tuple[Address, ...] | None = Field(default=None, description="Carbon copy recipients")
    bcc: tuple[Address, ...] | None = Field(
        default=None, description="Blind carbon copy recipients, never serialized"
    )
    reply_to: Address | None = Field(default=None, description="Reply-To mailbox")
    subject: str = Field(default="", description="Subject header")
    date: datetime = Field(description="Origination date")
    message_id: str = Field(description="Message-ID including angle brackets")
    body: BodyPart | Multipart = Field(description="Single part or multipart body")
    extension_headers: tuple[tuple[str, str], ...] = Field(
        default=(), description="Extension headers as (name, value) pairs in insertion order"
    )
    mime_version: str = Field(default="1.0", description="Mime-Version header value")

    @field_validator("extension_headers")
    @classmethod
    def check_extension_headers(
        cls, value: tuple[tuple[str, str], ...]
    ) -> tuple[tuple[str, str], ...]:
        return _checked_headers(value)

    @property
    def additional_headers(self) -> Mapping[str, str]:
        """Read-only view of the extension headers."""
        return MappingProxyType(dict(self.extension_headers))

    @classmethod
    def create(
        cls,
        from_: AddressLike,
        to: Sequence[AddressLike] | AddressLike = (),
        subject: str = "",
        body: BodyPart | Multipart | str = "",
        *,
        cc: Sequence[AddressLike] | None = None,
        bcc: Sequence[AddressLike] | None = None,
        reply_to: AddressLike | None = None,
        date: datetime | None = None,
        message_id: str | None = None,
        additional_headers: Mapping[str, str] | None = None,
        mime_version: str = "1.0",
        clock: Clock | None = None,
        entropy: EntropySource | None = None,
    ) -> Message:
        """Normalize caller inputs into a message.

        Address arguments accept parsed :class:`Address` values or raw
        strings. A plain string body becomes a ``text/plain`` UTF-8 part.
        An empty ``to`` is accepted here; deliverable messages are checked
        by :func:`email_composer.composer.compose_email`.

        Raises:
            AddressSyntaxError: If any address string is malformed.
            InvalidHeaderError: If the subject, Message-ID or a header is malformed.
        """
        sender = to_address(from_)
        recipients = to_addresses(to) or ()
        carbon_copies = to_addresses(cc)
        blind_copies = to_addresses(bcc)
        reply_address = to_address(reply_to) if reply_to is not None else None

        validate_header_value("Subject", subject)
        validate_header_value("Mime-Version", mime_version)
        headers = validate_headers(additional_headers or {})

        if date is None:
            date = (clock or SystemClock()).now()
        elif date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)

        if message_id is None:
            message_id = generate_message_id(sender, entropy)
        else:
            message_id = normalize_message_id(message_id)

        if isinstance(body, str):
            body = BodyPart.text(body)

        message = cls(
            from_=sender,
            to=recipients,
            cc=carbon_copies,
            bcc=blind_copies,
            reply_to=reply_address,
            subject=subject,
            date=date,
            message_id=message_id,
            body=body,
            extension_headers=tuple(headers.items()),
            mime_version=mime_version,
        )
        logger.debug(
            "message_created",
            message_id=message.message_id,
            recipient_count=len(message.to),
            multipart=isinstance(body, Multipart),
        )
        return message

    def with_headers(self, headers: Mapping[str, str]) -> Message:
        """Return a copy whose additional headers are overlaid with ``headers``.

        Matching names (case-insensitive) are overwritten in place, so
        applying the same overlay twice is the same as applying it once.
        """
        merged = merge_headers(self.additional_headers, headers)
        return self.model_copy(update={"extension_headers": _checked_headers(merged.items())})

    @property
    def body_text(self) -> str:
        """Decoded content of a single-part body, or the rendered multipart."""
        if isinstance(self.body, BodyPart):
            return self.body.content
        return self.body.render()

    def render(self, fold_width: int = DEFAULT_FOLD_WIDTH) -> str:
        return render_message(self, fold_width=fold_width)

    def as_bytes(self, fold_width: int = DEFAULT_FOLD_WIDTH) -> bytes:
        return message_to_bytes(self, fold_width=fold_width)

    def write(self, path: Path, fold_width: int = DEFAULT_FOLD_WIDTH) -> Path:
        return write_eml(self, path, fold_width=fold_width)

    def __str__(self) -> str:
        return self.render()


def _checked_headers(pairs: Iterable[tuple[str, str]]) -> tuple[tuple[str, str], ...]:
    """Validate extension headers, including address-valued overrides."""
    headers = validate_headers(dict(pairs))
    for name, value in headers.items():
        override_value(name, value)
    return tuple(headers.items())
