"""Unit tests for the multipart assembler."""

import pytest

from email_composer.exceptions import InvalidMultipartError
from email_composer.mime import BodyPart, Multipart, build_alternative, generate_boundary
from email_composer.providers import SeededEntropy


class _ScriptedEntropy:
    """Entropy source returning pre-recorded chunks."""

    def __init__(self, *chunks: bytes) -> None:
        self._chunks = list(chunks)

    def token_bytes(self, nbytes: int) -> bytes:
        return self._chunks.pop(0)


class TestBuildAlternative:
    """Test suite for build_alternative."""

    def test_two_parts_plain_text_first(self) -> None:
        multipart = build_alternative("Hi", "<h1>Hi</h1>", boundary="XYZ")

        assert multipart.subtype == "alternative"
        assert len(multipart.parts) == 2
        assert multipart.parts[0].content_type.mime_type == "text/plain"
        assert multipart.parts[1].content_type.mime_type == "text/html"
        assert multipart.parts[0].content == "Hi"
        assert multipart.parts[1].content == "<h1>Hi</h1>"

    def test_render(self) -> None:
        multipart = build_alternative("Hi", "<h1>Hi</h1>", boundary="XYZ")

        assert multipart.render() == (
            "--XYZ\r\n"
            "Content-Type: text/plain; charset=UTF-8\r\n"
            "Content-Transfer-Encoding: 7bit\r\n"
            "\r\n"
            "Hi\r\n"
            "--XYZ\r\n"
            "Content-Type: text/html; charset=UTF-8\r\n"
            "Content-Transfer-Encoding: 7bit\r\n"
            "\r\n"
            "<h1>Hi</h1>\r\n"
            "--XYZ--\r\n"
        )

    def test_content_type(self) -> None:
        multipart = build_alternative("Hi", "<h1>Hi</h1>", boundary="XYZ")

        assert multipart.content_type.header_value() == 'multipart/alternative; boundary="XYZ"'

    def test_generated_boundary_is_reproducible_with_seeded_entropy(self) -> None:
        first = build_alternative("Hi", "<p>Hi</p>", entropy=SeededEntropy(7))
        second = build_alternative("Hi", "<p>Hi</p>", entropy=SeededEntropy(7))

        assert first.boundary == second.boundary
        assert first.boundary.startswith("=_")
        assert len(first.boundary) == 18

    def test_boundary_prefix(self) -> None:
        multipart = build_alternative(
            "Hi", "<p>Hi</p>", entropy=SeededEntropy(7), boundary_prefix="Apple-Mail=_"
        )

        assert multipart.boundary.startswith("Apple-Mail=_")

    @pytest.mark.parametrize("prefix", ["=_", "Apple-Mail=_"])
    def test_generated_content_type_line_fits_fold_width(self, prefix: str) -> None:
        multipart = build_alternative(
            "Hi", "<p>Hi</p>", entropy=SeededEntropy(3), boundary_prefix=prefix
        )

        assert len(f"Content-Type: {multipart.content_type.header_value()}") <= 78

    def test_render_bytes_matches_render_for_utf8(self) -> None:
        multipart = build_alternative("Grüße", "<p>Grüße</p>", boundary="XYZ")

        assert multipart.render_bytes() == multipart.render().encode("utf-8")


class TestMultipartValidation:
    """Test suite for multipart invariants."""

    def test_zero_parts_raise(self) -> None:
        with pytest.raises(InvalidMultipartError):
            Multipart.create("alternative", [])

    def test_zero_parts_raise_on_direct_construction(self) -> None:
        with pytest.raises(InvalidMultipartError):
            Multipart(subtype="mixed", boundary="XYZ", parts=())

    def test_supplied_boundary_collision_raises(self) -> None:
        with pytest.raises(InvalidMultipartError):
            build_alternative("see --XYZ above", "<p>Hi</p>", boundary="XYZ")

    def test_generated_boundary_collision_is_regenerated(self) -> None:
        colliding = "=_" + "A" * 16
        entropy = _ScriptedEntropy(b"\x00" * 10, b"\x11" * 10)

        multipart = build_alternative(f"text mentioning {colliding}", "<p>Hi</p>", entropy=entropy)

        assert multipart.boundary == "=_CEIRCEIRCEIRCEIR"

    @pytest.mark.parametrize("boundary", ["", "has\ttab", "x" * 71, "trailing "])
    def test_invalid_boundaries(self, boundary: str) -> None:
        with pytest.raises(InvalidMultipartError):
            Multipart.create("mixed", [BodyPart.text("Hi")], boundary)

    def test_single_part_multipart(self) -> None:
        multipart = Multipart.create("Mixed", [BodyPart.text("only")], "b1")

        assert multipart.subtype == "mixed"
        assert multipart.render().endswith("only\r\n--b1--\r\n")


def test_generate_boundary_uses_entropy() -> None:
    assert generate_boundary(_ScriptedEntropy(b"\xab" * 10)) == "=_VOV2XK5LVOV2XK5L"
