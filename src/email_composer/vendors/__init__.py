"""Vendor-specific message variants."""

from .apple import APPLE_MIME_VERSION, apple_headers, apple_mail_draft, to_apple_mail

__all__ = ["APPLE_MIME_VERSION", "apple_headers", "apple_mail_draft", "to_apple_mail"]
