"""Markup collaborators used by the composer.

The composer treats HTML production as an opaque step: it accepts either a
ready string or a *markup description* (a jinja2 template or any callable
returning a string) and only ever looks at the rendered text. The plain-text
fallback for HTML-only drafts is derived by :func:`html_to_text`.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from html.parser import HTMLParser
from pathlib import Path
from typing import Any, Union

import structlog
from jinja2 import Environment, FileSystemLoader, Template, TemplateError, select_autoescape

from email_composer.exceptions import RenderError

logger = structlog.get_logger()

MarkupDescription = Union[str, Template, Callable[[], str]]


def create_render_environment(top_dir: Path | None = None) -> Environment:
    """Jinja2 environment with HTML autoescaping, optionally loading from a folder."""
    loader = None
    if top_dir is not None:
        if not top_dir.is_dir():
            raise RenderError(f"Template folder not found: {top_dir}")
        loader = FileSystemLoader(top_dir)
    return Environment(
        loader=loader,
        autoescape=select_autoescape(["html", "xml"], default_for_string=True),
    )


def render_markup(description: MarkupDescription, **context: Any) -> str:
    """Render a markup description to a string.

    Strings are returned unchanged; templates are rendered with ``context``;
    callables are invoked without arguments.

    Raises:
        RenderError: If the template or callable fails, or a callable returns
            something other than a string.
    """
    if isinstance(description, str):
        return description
    try:
        if isinstance(description, Template):
            return description.render(**context)
        rendered = description()
    except RenderError:
        raise
    except TemplateError as err:
        raise RenderError(f"Failed to render markup template: {err}") from err
    except Exception as err:
        raise RenderError(f"Markup renderer raised {type(err).__name__}: {err}") from err
    if not isinstance(rendered, str):
        raise RenderError(f"Markup renderer returned {type(rendered).__name__}, expected str")
    return rendered


def render_template(env: Environment, name: str, **context: Any) -> str:
    """Render template ``name`` from ``env``."""
    try:
        template = env.get_template(name)
    except TemplateError as err:
        raise RenderError(f"Cannot load template {name!r}: {err}") from err
    return render_markup(template, **context)


_SKIPPED_TAGS = {"script", "style", "head", "title", "template"}
_BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "div", "dl", "dt", "dd",
    "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "main",
    "nav", "ol", "p", "pre", "section", "table", "tr", "ul",
}


class _TextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._chunks: list[str] = []
        self._skip_depth = 0
        self._pre_depth = 0
        self._links: list[tuple[str | None, int]] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in _SKIPPED_TAGS:
            self._skip_depth += 1
            return
        if tag == "br":
            self._chunks.append("\n")
        elif tag in _BLOCK_TAGS:
            self._chunks.append("\n")
            if tag == "li":
                self._chunks.append("- ")
        if tag == "pre":
            self._pre_depth += 1
        if tag == "a":
            self._links.append((dict(attrs).get("href"), len(self._chunks)))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in ("br", "hr"):
            self._chunks.append("\n")

    def handle_endtag(self, tag: str) -> None:
        if tag in _SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if tag == "a" and self._links:
            href, start = self._links.pop()
            label = "".join(self._chunks[start:]).strip()
            if href and label != href and not href.startswith(("#", "mailto:")):
                self._chunks.append(f" ({href})")
        if tag == "pre":
            self._pre_depth = max(0, self._pre_depth - 1)
        if tag in _BLOCK_TAGS:
            self._chunks.append("\n")

    def handle_data(self, data: str) -> None:
        if self._skip_depth:
            return
        if not self._pre_depth:
            data = re.sub(r"\s+", " ", data)
        self._chunks.append(data)

    def text(self) -> str:
        lines = [line.strip() for line in "".join(self._chunks).splitlines()]
        text = "\n".join(lines)
        return re.sub(r"\n{3,}", "\n\n", text).strip()


def html_to_text(markup: str) -> str:
    """Best-effort plain-text rendering of an HTML document."""
    parser = _TextExtractor()
    parser.feed(markup)
    parser.close()
    text = parser.text()
    logger.debug("html_converted_to_text", html_length=len(markup), text_length=len(text))
    return text
