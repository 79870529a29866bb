"""Construction of deliverable messages from text and/or HTML content.

This is the layer that enforces a non-empty ``To`` list; the underlying
:class:`~email_composer.models.Message` model does not, so that drafts
without recipients remain constructible.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

import structlog

from email_composer.exceptions import EmptyRecipientsError
from email_composer.markup import MarkupDescription, render_markup
from email_composer.mime.body_part import BodyPart
from email_composer.mime.multipart import Multipart, build_alternative
from email_composer.models.address import Address
from email_composer.models.message import AddressLike, Message
from email_composer.providers import Clock, EntropySource

logger = structlog.get_logger()


def build_body(
    text: str | None = None,
    html: str | None = None,
    *,
    boundary: str | None = None,
    entropy: EntropySource | None = None,
) -> BodyPart | Multipart:
    """Pick the body shape for the given representations.

    Both present gives ``multipart/alternative`` (text first); a single one
    gives a single part; neither gives an empty ``text/plain`` part.
    """
    if text is not None and html is not None:
        return build_alternative(text, html, boundary, entropy=entropy)
    if html is not None:
        return BodyPart.html(html)
    return BodyPart.text(text or "")


def compose_email(
    *,
    to: Sequence[AddressLike] | AddressLike,
    from_: AddressLike,
    subject: str,
    text: str | None = None,
    html: MarkupDescription | None = None,
    html_context: Mapping[str, Any] | None = None,
    cc: Sequence[AddressLike] | None = None,
    bcc: Sequence[AddressLike] | None = None,
    reply_to: AddressLike | None = None,
    additional_headers: Mapping[str, str] | None = None,
    boundary: str | None = None,
    date: datetime | None = None,
    message_id: str | None = None,
    clock: Clock | None = None,
    entropy: EntropySource | None = None,
) -> Message:
    """Compose a deliverable message.

    Args:
        to: Primary recipients; must not be empty.
        from_: Sender mailbox.
        subject: Subject line.
        text: Plain-text representation.
        html: HTML string, jinja2 template or callable producing HTML.
        html_context: Variables passed when ``html`` is a template.
        cc: Carbon copy recipients.
        bcc: Blind carbon copy recipients (never serialized).
        reply_to: Reply-To mailbox.
        additional_headers: Extension headers, appended after the standard ones.
        boundary: Multipart boundary override.
        date: Date override; defaults to ``clock.now()``.
        message_id: Message-ID override.
        clock: Time source used when ``date`` is omitted.
        entropy: Randomness used for the Message-ID and boundary.

    Returns:
        Message: A render-ready message.

    Raises:
        EmptyRecipientsError: If ``to`` is empty.
        AddressSyntaxError: If any address is malformed.
        RenderError: If the HTML description cannot be rendered.
    """
    recipients = [to] if isinstance(to, (str, Address)) else list(to)
    if not recipients:
        raise EmptyRecipientsError("A deliverable message needs at least one To recipient")

    html_content = None
    if html is not None:
        html_content = render_markup(html, **dict(html_context or {}))

    body = build_body(text, html_content, boundary=boundary, entropy=entropy)
    message = Message.create(
        from_=from_,
        to=recipients,
        subject=subject,
        body=body,
        cc=cc,
        bcc=bcc,
        reply_to=reply_to,
        date=date,
        message_id=message_id,
        additional_headers=additional_headers,
        clock=clock,
        entropy=entropy,
    )
    logger.info(
        "email_composed",
        message_id=message.message_id,
        recipients=len(message.to),
        has_text=text is not None,
        has_html=html_content is not None,
    )
    return message
