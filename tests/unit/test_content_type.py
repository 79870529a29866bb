"""Unit tests for media types and transfer encodings."""

import pytest

from email_composer.exceptions import InvalidHeaderError
from email_composer.mime import TEXT_HTML_UTF8, TEXT_PLAIN_UTF8, ContentType, TransferEncoding
from email_composer.mime.content_type import multipart_content_type


class TestContentType:
    """Test suite for ContentType."""

    def test_named_constants(self) -> None:
        assert TEXT_PLAIN_UTF8.header_value() == "text/plain; charset=UTF-8"
        assert TEXT_HTML_UTF8.header_value() == "text/html; charset=UTF-8"

    def test_type_and_subtype_lower_cased_on_render(self) -> None:
        content_type = ContentType("TEXT", "Plain", (("charset", "UTF-8"),))

        assert content_type.header_value() == "text/plain; charset=UTF-8"
        assert content_type == TEXT_PLAIN_UTF8

    def test_parameter_order_is_insertion_order(self) -> None:
        content_type = ContentType.of("text/plain", {"format": "flowed", "charset": "UTF-8"})

        assert content_type.header_value() == "text/plain; format=flowed; charset=UTF-8"

    def test_special_values_are_quoted(self) -> None:
        content_type = ContentType.of("application/x-report", {"name": 'my "q1" report.txt'})

        assert content_type.header_value() == r'application/x-report; name="my \"q1\" report.txt"'

    def test_boundary_is_always_quoted(self) -> None:
        content_type = multipart_content_type("alternative", "abc123")

        assert content_type.header_value() == 'multipart/alternative; boundary="abc123"'

    def test_parameter_names_are_case_insensitive_and_unique(self) -> None:
        content_type = ContentType("text", "plain", (("charset", "a"), ("CHARSET", "b")))

        assert content_type.parameters == (("CHARSET", "b"),)
        assert content_type.get_parameter("Charset") == "b"

    def test_with_parameter_replaces(self) -> None:
        content_type = TEXT_HTML_UTF8.with_parameter("charset", "ISO-8859-1")

        assert content_type.charset == "ISO-8859-1"
        assert TEXT_HTML_UTF8.charset == "UTF-8"

    def test_parse(self) -> None:
        content_type = ContentType.parse('multipart/alternative; boundary="a b"; foo=bar')

        assert content_type.mime_type == "multipart/alternative"
        assert content_type.get_parameter("boundary") == "a b"
        assert content_type.get_parameter("foo") == "bar"

    def test_parse_quoted_charset(self) -> None:
        assert ContentType.parse('text/html; charset="ISO-8859-1"').charset == "ISO-8859-1"

    @pytest.mark.parametrize("mime_type", ["text", "text/pl ain", "te@xt/plain"])
    def test_invalid_media_types(self, mime_type: str) -> None:
        with pytest.raises(InvalidHeaderError):
            ContentType.of(mime_type)

    def test_parameter_values_reject_line_breaks(self) -> None:
        with pytest.raises(InvalidHeaderError):
            ContentType.of("text/plain", {"charset": "UTF-8\r\nBcc: x@y.com"})


def test_transfer_encoding_values() -> None:
    assert TransferEncoding.SEVEN_BIT.value == "7bit"
    assert TransferEncoding.QUOTED_PRINTABLE.value == "quoted-printable"
    assert TransferEncoding("base64") is TransferEncoding.BASE64
