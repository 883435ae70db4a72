"""Template rendering engine for beanloop.

This module uses Jinja2 to render the site's pages. Project templates in the
configured templates directory override the packaged defaults by name.

Key class:
- TemplateEngine: Renders the index, post and not-found pages.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup
from pygments.formatters import HtmlFormatter

from .collections import PostCollection
from .config import SiteMetadata
from .content import Post

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        metadata: Site metadata exposed to templates as ``site``.
        env: Jinja2 environment.
    """

    def __init__(self, metadata: SiteMetadata, templates_dir: Path | None = None):
        """Initialize the template engine.

        Args:
            metadata: Site metadata.
            templates_dir: Optional project directory with template overrides.
        """
        self.metadata = metadata
        search_path = [str(_TEMPLATES_DIR)]
        if templates_dir is not None and templates_dir.is_dir():
            search_path.insert(0, str(templates_dir))
        self.env = Environment(
            loader=FileSystemLoader(search_path),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
        )
        self._install_globals()

    def _install_globals(self) -> None:
        self.env.globals["site"] = self.metadata
        self.env.globals["url_for"] = self._url_for
        self.env.globals["pygments_css"] = self._pygments_css

    @staticmethod
    def _pygments_css() -> Markup:
        return Markup(HtmlFormatter().get_style_defs(".highlight"))

    @staticmethod
    def _url_for(path: str) -> str:
        """Return a root-relative URL for ``path``; external URLs pass through."""
        if path.startswith(("http://", "https://", "//")):
            return path
        return path if path.startswith("/") else f"/{path}"

    def render_index(self, posts: PostCollection, bio: Markup) -> str:
        """Render the post listing.

        Args:
            posts: Published posts; rendered in listing order.
            bio: Pre-rendered bio markup.

        Returns:
            Rendered HTML.
        """
        return self._render("index.html.jinja", posts=posts.sorted(), bio=bio)

    def render_post(
        self,
        post: Post,
        newer: Post | None,
        older: Post | None,
        bio: Markup,
    ) -> str:
        """Render a single post page with navigation to its neighbours."""
        return self._render(
            "post.html.jinja",
            post=post,
            content=Markup(post.content),
            newer=newer,
            older=older,
            bio=bio,
        )

    def render_not_found(self, bio: Markup) -> str:
        return self._render("404.html.jinja", bio=bio)

    def _render(self, name: str, **context: Any) -> str:
        return self.env.get_template(name).render(**context)
