"""Apple Mail draft compatibility.

Apple Mail recognises a message as an editable draft when it carries a
fixed set of extension headers. :func:`to_apple_mail` overlays those
headers on an existing message; :func:`apple_mail_draft` builds a draft
straight from HTML.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

import structlog

from email_composer.markup import MarkupDescription, html_to_text, render_markup
from email_composer.mime.body_part import BodyPart
from email_composer.mime.multipart import build_alternative
from email_composer.models.message import AddressLike, Message
from email_composer.providers import Clock, EntropySource, SystemEntropy, random_uuid

logger = structlog.get_logger()

APPLE_MIME_VERSION = r"1.0 (Mac OS X Mail 16.0 \(3826.700.71\))"
APPLE_BOUNDARY_PREFIX = "Apple-Mail=_"
APPLE_BASE_URL = "x-msg://1/"
APPLE_DRAFT_TYPE = "com.apple.mail-draft"


def apple_headers(universal_id: str) -> dict[str, str]:
    """The seven headers that mark a message as an Apple Mail draft."""
    return {
        "Mime-Version": APPLE_MIME_VERSION,
        "X-Apple-Base-Url": APPLE_BASE_URL,
        "X-Universally-Unique-Identifier": universal_id,
        "X-Apple-Mail-Remote-Attachments": "YES",
        "X-Apple-Windows-Friendly": "1",
        "X-Apple-Mail-Signature": "",
        "X-Uniform-Type-Identifier": APPLE_DRAFT_TYPE,
    }


def to_apple_mail(
    message: Message,
    universal_id: str | None = None,
    *,
    entropy: EntropySource | None = None,
) -> Message:
    """Return a copy of ``message`` carrying the Apple Mail headers.

    Only ``additional_headers`` changes. Existing entries with the same
    names are overwritten, so the overlay is idempotent for a given
    ``universal_id``.
    """
    if universal_id is None:
        universal_id = random_uuid(entropy or SystemEntropy())
    apple = message.with_headers(apple_headers(universal_id))
    logger.debug(
        "apple_overlay_applied",
        message_id=message.message_id,
        universal_id=universal_id,
    )
    return apple


def apple_mail_draft(
    html: MarkupDescription,
    from_: AddressLike,
    subject: str = "",
    *,
    to: Sequence[AddressLike] = (),
    text: str | None = None,
    date: datetime | None = None,
    boundary: str | None = None,
    message_id: str | None = None,
    universal_id: str | None = None,
    to_text: Callable[[str], str] = html_to_text,
    clock: Clock | None = None,
    entropy: EntropySource | None = None,
) -> Message:
    """Build an Apple Mail draft from HTML.

    A plain-text fallback is derived with ``to_text`` unless ``text`` is
    given. When a fallback is available the body is ``multipart/alternative``
    with a boundary of the form ``Apple-Mail=_<id>``; otherwise it is a
    single ``text/html`` part. Recipients are optional for drafts.
    """
    html_content = render_markup(html)
    fallback = text if text is not None else to_text(html_content)

    if fallback:
        body = build_alternative(
            fallback,
            html_content,
            APPLE_BOUNDARY_PREFIX + boundary if boundary is not None else None,
            entropy=entropy,
            boundary_prefix=APPLE_BOUNDARY_PREFIX,
        )
    else:
        body = BodyPart.html(html_content)

    message = Message.create(
        from_=from_,
        to=to,
        subject=subject,
        body=body,
        date=date,
        message_id=message_id,
        clock=clock,
        entropy=entropy,
    )
    return to_apple_mail(message, universal_id, entropy=entropy)
