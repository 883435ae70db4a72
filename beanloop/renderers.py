"""Markdown rendering for beanloop.

Post bodies are converted to HTML with mistune. Headings receive stable
anchor ids and fenced code blocks with a language are highlighted with
Pygments.

Key classes:
- MarkdownRenderer: Renders a Markdown body to HTML.
"""

from __future__ import annotations

import re

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .html_utils import escape_xml


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly anchor id from heading text.

    Args:
        text: The heading text, possibly containing inline HTML.

    Returns:
        Slug suitable for an ``id`` attribute.
    """
    slug = re.sub(r"<[^>]+>", "", text).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-") or "section"


class _HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer with heading anchors and Pygments code highlighting."""

    def __init__(self):
        super().__init__(escape=False)
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        lang = info.split()[0] if info else ""
        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(cssclass="highlight")
                return highlight(code, lexer, formatter)
        lang_class = f' class="language-{lang}"' if lang else ""
        return f"<pre><code{lang_class}>{escape_xml(code)}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown post bodies to HTML."""

    plugins = ["strikethrough", "footnotes", "table", "url"]

    def render(self, content: str) -> str:
        """Render Markdown content to HTML.

        A fresh renderer is used per call so heading ids never leak
        between posts.

        Args:
            content: Markdown source.

        Returns:
            Rendered HTML.
        """
        markdown = mistune.create_markdown(
            renderer=_HighlightRenderer(), plugins=self.plugins
        )
        return markdown(content)


default_markdown_renderer = MarkdownRenderer()
