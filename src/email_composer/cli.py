"""Command-line interface for Email Composer.

This module provides the main entry point for the CLI application, which
writes composed messages as ``.eml`` files (or to stdout).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import structlog

from email_composer import __version__
from email_composer.composer import compose_email
from email_composer.config import Settings, get_settings
from email_composer.exceptions import ConfigurationError, EmailComposerError, InvalidHeaderError
from email_composer.models import Message
from email_composer.vendors import apple_mail_draft, to_apple_mail

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="email-composer", description="Email Composer")
    subparsers = parser.add_subparsers(dest="command", required=True)

    compose_parser = subparsers.add_parser("compose", help="Compose a message and write it as .eml")
    _add_common_arguments(compose_parser)
    compose_parser.add_argument(
        "--to",
        action="append",
        default=[],
        help="Recipient address (repeatable)",
    )
    compose_parser.add_argument("--cc", action="append", default=[], help="Cc address (repeatable)")
    compose_parser.add_argument("--bcc", action="append", default=[], help="Bcc address (repeatable)")
    compose_parser.add_argument("--reply-to", default=None, help="Reply-To address")
    text_group = compose_parser.add_mutually_exclusive_group()
    text_group.add_argument("--text", default=None, help="Plain-text body")
    text_group.add_argument("--text-file", type=Path, default=None, help="File with the plain-text body")
    compose_parser.add_argument("--html-file", type=Path, default=None, help="File with the HTML body")
    compose_parser.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="NAME: VALUE",
        help="Additional header (repeatable)",
    )
    compose_parser.add_argument(
        "--apple",
        action="store_true",
        help="Add Apple Mail draft headers",
    )

    draft_parser = subparsers.add_parser("draft", help="Build an Apple Mail draft from an HTML file")
    _add_common_arguments(draft_parser)
    draft_parser.add_argument("--html-file", type=Path, required=True, help="File with the HTML body")
    draft_parser.add_argument("--to", action="append", default=[], help="Recipient address (repeatable)")

    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--from", dest="sender", default=None, help="Sender address")
    parser.add_argument("--subject", default="", help="Subject line")
    parser.add_argument("--universal-id", default=None, help="X-Universally-Unique-Identifier value")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Destination .eml file (default: stdout)",
    )


def _parse_header_options(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise InvalidHeaderError(f"Expected 'Name: value', got {raw!r}")
        headers[name.strip()] = value.strip()
    return headers


def _sender(args: argparse.Namespace, settings: Settings) -> str:
    sender = args.sender or settings.default_sender
    if not sender:
        raise ConfigurationError("No sender: pass --from or set EMAIL_COMPOSER_DEFAULT_SENDER")
    return sender


def _read(path: Path | None) -> str | None:
    return path.read_text(encoding="utf-8") if path is not None else None


def _emit(message: Message, args: argparse.Namespace, settings: Settings) -> None:
    if args.output is not None:
        message.write(args.output, fold_width=settings.header_fold_width)
        print(f"Wrote {message.message_id} to {args.output}", file=sys.stderr)
        return
    sys.stdout.buffer.write(message.as_bytes(fold_width=settings.header_fold_width))
    sys.stdout.flush()


def _cmd_compose(args: argparse.Namespace, settings: Settings) -> int:
    text = args.text if args.text is not None else _read(args.text_file)
    message = compose_email(
        to=args.to,
        from_=_sender(args, settings),
        subject=args.subject,
        text=text,
        html=_read(args.html_file),
        cc=args.cc or None,
        bcc=args.bcc or None,
        reply_to=args.reply_to,
        additional_headers=_parse_header_options(args.header),
    )
    if args.apple:
        message = to_apple_mail(message, args.universal_id)
    _emit(message, args, settings)
    return 0


def _cmd_draft(args: argparse.Namespace, settings: Settings) -> int:
    message = apple_mail_draft(
        args.html_file.read_text(encoding="utf-8"),
        _sender(args, settings),
        args.subject,
        to=args.to,
        universal_id=args.universal_id,
    )
    _emit(message, args, settings)
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Email Composer CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Logs go to stderr so stdout can carry the message itself.
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )

    logger.debug("email_composer_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    try:
        if parsed.command == "compose":
            return _cmd_compose(parsed, settings)
        if parsed.command == "draft":
            return _cmd_draft(parsed, settings)
    except EmailComposerError as err:
        logger.error("composition_failed", command=parsed.command, error=str(err))
        print(f"error: {err}", file=sys.stderr)
        return 2

    logger.error("unknown_command", command=parsed.command)
    return 2


if __name__ == "__main__":
    sys.exit(main())
