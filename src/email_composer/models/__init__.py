"""Data models for Email Composer.

Addresses and media types are small frozen value objects; the message
itself is a frozen Pydantic model.
"""

from .address import Address
from email_composer.mime.content_type import (
    TEXT_HTML_UTF8,
    TEXT_PLAIN_UTF8,
    ContentType,
    TransferEncoding,
    multipart_content_type,
    text_content_type,
)
from .message import Message

__all__ = [
    "Address",
    "ContentType",
    "Message",
    "TEXT_HTML_UTF8",
    "TEXT_PLAIN_UTF8",
    "TransferEncoding",
    "multipart_content_type",
    "text_content_type",
]
