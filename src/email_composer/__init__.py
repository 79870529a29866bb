"""Email Composer - RFC 5322 message composition and .eml serialization.

This package provides tools for building structured email messages
(addresses, subject, plain-text and HTML bodies) and rendering them into
standards-compliant MIME wire format, including Apple Mail draft headers.
"""

__version__ = "0.1.0"
__author__ = "Trickl"

from email_composer.composer import compose_email
from email_composer.config import Settings, get_settings
from email_composer.models import Address, ContentType, Message, TransferEncoding
from email_composer.mime import BodyPart, Multipart, build_alternative
from email_composer.vendors import apple_mail_draft, to_apple_mail

__all__ = [
    "Address",
    "BodyPart",
    "ContentType",
    "Message",
    "Multipart",
    "Settings",
    "TransferEncoding",
    "apple_mail_draft",
    "build_alternative",
    "compose_email",
    "get_settings",
    "to_apple_mail",
    "__version__",
    "__author__",
]
