"""Unit tests for compose_email."""

import pytest

from email_composer.composer import build_body, compose_email
from email_composer.exceptions import AddressSyntaxError, EmptyRecipientsError, RenderError
from email_composer.markup import create_render_environment
from email_composer.mime import BodyPart, Multipart
from email_composer.models import Address


class TestComposeEmail:
    """Test suite for compose_email."""

    def test_plain_text_email(self, fixed_clock) -> None:
        message = compose_email(
            to=["b@y.com"], from_="a@x.com", subject="Hi", text="Hello", clock=fixed_clock
        )
        rendered = message.render()

        assert "From: a@x.com\r\n" in rendered
        assert "To: b@y.com\r\n" in rendered
        assert "Subject: Hi\r\n" in rendered
        assert "Content-Type: text/plain; charset=UTF-8\r\n" in rendered
        assert rendered.endswith("Hello")

    def test_text_and_html_is_multipart(self, fixed_clock, seeded_entropy) -> None:
        message = compose_email(
            to=["b@y.com"],
            from_="a@x.com",
            subject="Hi",
            text="Hi",
            html="<h1>Hi</h1>",
            clock=fixed_clock,
            entropy=seeded_entropy,
        )

        assert isinstance(message.body, Multipart)
        assert [p.content for p in message.body.parts] == ["Hi", "<h1>Hi</h1>"]

    def test_html_only(self, fixed_clock) -> None:
        message = compose_email(
            to="b@y.com", from_="a@x.com", subject="Hi", html="<h1>Hello</h1>", clock=fixed_clock
        )

        assert isinstance(message.body, BodyPart)
        assert message.body.content == "<h1>Hello</h1>"
        assert message.body.content_type.mime_type == "text/html"

    def test_address_objects_are_accepted(self, fixed_clock) -> None:
        recipient = Address.parse("Bee <b@y.com>")
        message = compose_email(
            to=recipient, from_="a@x.com", subject="Hi", text="x", clock=fixed_clock
        )

        assert message.to == (recipient,)

    def test_all_optional_fields(self, fixed_clock) -> None:
        message = compose_email(
            to=["user1@example.com", "user2@example.com"],
            from_="noreply@company.com",
            reply_to="support@company.com",
            cc=["manager@company.com"],
            bcc=["archive@company.com"],
            subject="Important Notification",
            text="Plain text version of the email.",
            html="<p>Important Notification</p>",
            additional_headers={"X-Priority": "1", "X-Mailer": "email-composer"},
            clock=fixed_clock,
        )

        assert len(message.to) == 2
        assert message.reply_to == Address.parse("support@company.com")
        assert len(message.cc) == 1
        assert len(message.bcc) == 1
        assert message.additional_headers["X-Mailer"] == "email-composer"
        assert "archive@company.com" not in message.render()

    def test_empty_recipients_raise(self) -> None:
        with pytest.raises(EmptyRecipientsError):
            compose_email(to=[], from_="a@x.com", subject="Hi", text="Hello")

    def test_invalid_sender_raises(self) -> None:
        with pytest.raises(AddressSyntaxError):
            compose_email(to=["b@y.com"], from_="not-an-address", subject="Hi", text="Hello")

    def test_jinja_template_html(self, fixed_clock) -> None:
        template = create_render_environment().from_string("<p>Hello {{ name }}</p>")
        message = compose_email(
            to=["b@y.com"],
            from_="a@x.com",
            subject="Welcome",
            html=template,
            html_context={"name": "<Ann>"},
            clock=fixed_clock,
        )

        assert message.body.content == "<p>Hello &lt;Ann&gt;</p>"

    def test_callable_html(self, fixed_clock) -> None:
        message = compose_email(
            to=["b@y.com"],
            from_="a@x.com",
            subject="Welcome",
            html=lambda: "<p>built</p>",
            clock=fixed_clock,
        )

        assert message.body.content == "<p>built</p>"

    def test_failing_markup_raises_render_error(self) -> None:
        def broken() -> str:
            raise ValueError("boom")

        with pytest.raises(RenderError) as exc_info:
            compose_email(to=["b@y.com"], from_="a@x.com", subject="Hi", html=broken)

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_alternative_content_type_line_is_not_folded(self) -> None:
        message = compose_email(
            to=["b@y.com"], from_="a@x.com", subject="Hi", text="Hi", html="<h1>Hi</h1>"
        )
        expected = f'Content-Type: multipart/alternative; boundary="{message.body.boundary}"\r\n'

        assert expected in message.render()

    def test_callable_returning_non_string_raises_render_error(self) -> None:
        with pytest.raises(RenderError):
            compose_email(to=["b@y.com"], from_="a@x.com", subject="Hi", html=lambda: b"<p>x</p>")


class TestBuildBody:
    """Test suite for body shape selection."""

    def test_neither_gives_empty_text_part(self) -> None:
        body = build_body()

        assert isinstance(body, BodyPart)
        assert body.content == ""
        assert body.content_type.mime_type == "text/plain"

    def test_boundary_override(self) -> None:
        body = build_body("a", "<p>b</p>", boundary="fixed-boundary")

        assert body.boundary == "fixed-boundary"
