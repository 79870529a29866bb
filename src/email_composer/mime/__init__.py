"""MIME entities: media types, leaf body parts and multipart containers."""

from .body_part import BodyPart
from .content_type import TEXT_HTML_UTF8, TEXT_PLAIN_UTF8, ContentType, TransferEncoding
from .multipart import Multipart, build_alternative, generate_boundary

__all__ = [
    "BodyPart",
    "ContentType",
    "Multipart",
    "TEXT_HTML_UTF8",
    "TEXT_PLAIN_UTF8",
    "TransferEncoding",
    "build_alternative",
    "generate_boundary",
]
