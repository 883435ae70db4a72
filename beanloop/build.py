"""Site building functionality for beanloop.

This module runs the one-way build pipeline: load configuration and site
metadata, load and validate posts, resolve the components' queries, render
every page and write the output tree with assets and feeds.

Key functions:
- build_site: Build the entire site.
- load_posts: Load and validate posts without writing anything.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import TemplateError, TemplateSyntaxError

from .assets import AssetPipeline, AssetStore, ImageProcessor
from .collections import PostCollection
from .components import ComponentError, bio_query, render_bio
from .config import CONFIG_FILENAME, ConfigError, SiteMetadata, load_config
from .content import ContentError, ContentProcessor, Post
from .feeds import create_default_feed_registry
from .logging import get_logger
from .query import QueryError, QueryResolver
from .templates import TemplateEngine
from .utils import ensure_clean_dir

logger = get_logger("build")


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


@dataclass
class BuildResult:
    """Result of a site build.

    Attributes:
        posts: Published posts in listing order.
        output_dir: Directory where the site was built.
        metadata: Site metadata used for the build.
        pages: Output HTML files written.
        feeds: Feed filenames written.
    """

    posts: list[Post]
    output_dir: Path
    metadata: SiteMetadata
    pages: list[Path] = field(default_factory=list)
    feeds: list[str] = field(default_factory=list)


def _load_settings(project_root: Path) -> tuple[dict[str, Any], SiteMetadata]:
    config_path = project_root / CONFIG_FILENAME
    try:
        config = load_config(project_root)
        metadata = SiteMetadata.from_config(config, config_path)
    except ConfigError as exc:
        raise BuildError(exc.source_path, exc.message, exc) from exc
    return config, metadata


def _load_posts(
    project_root: Path, config: dict[str, Any], include_drafts: bool
) -> list[Post]:
    content_dir = project_root / config["content_dir"]
    try:
        return ContentProcessor(content_dir).load(include_drafts=include_drafts)
    except ContentError as exc:
        raise BuildError(exc.source_path, exc.message, exc) from exc


def _check_output_dir(
    project_root: Path, config: dict[str, Any], output_dir: Path, config_path: Path
) -> None:
    """Refuse an output directory whose cleaning would delete project sources."""
    output = output_dir.resolve()
    root = project_root.resolve()
    if output == root or output in root.parents:
        raise BuildError(config_path, f"Refusing to use {output_dir} as output directory")
    for key in ("content_dir", "assets_dir", "static_dir", "templates_dir"):
        source = (root / config[key]).resolve()
        if source == output or output in source.parents:
            raise BuildError(
                config_path,
                f"Refusing to use {output_dir} as output directory: "
                f"it contains {key} ({config[key]})",
            )


def load_posts(project_root: Path, include_drafts: bool = False) -> list[Post]:
    """Load and validate the posts of a project.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft posts.

    Returns:
        Posts in listing order.

    Raises:
        BuildError: If the configuration or any post is invalid.
    """
    config, _ = _load_settings(project_root)
    posts = _load_posts(project_root, config, include_drafts)
    return list(PostCollection(posts).sorted())


def build_site(
    project_root: Path,
    include_drafts: bool = False,
    debug: bool | None = None,
    output_dir_override: Path | None = None,
) -> BuildResult:
    """Build the entire static site.

    Any failure aborts the build with a BuildError naming the offending
    file or query.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft posts.
        debug: Enable component diagnostics; defaults to the ``debug``
            config value.
        output_dir_override: Write output here instead of ``output_dir``.

    Returns:
        BuildResult describing the build.

    Raises:
        BuildError: On the first configuration, content, query, component
            or template error.
    """
    config_path = project_root / CONFIG_FILENAME
    config, metadata = _load_settings(project_root)
    if debug is None:
        debug = bool(config.get("debug"))

    posts = PostCollection(_load_posts(project_root, config, include_drafts))
    output_dir = output_dir_override or (project_root / config["output_dir"])
    _check_output_dir(project_root, config, output_dir, config_path)
    ensure_clean_dir(output_dir)

    resolver = QueryResolver(
        metadata,
        AssetStore(project_root / config["assets_dir"]),
        ImageProcessor(output_dir),
    )
    query = bio_query(
        config["avatar_pattern"],
        config["avatar_width"],
        config["avatar_height"],
    )
    try:
        data = resolver.resolve(query)
    except QueryError as exc:
        source = getattr(exc.original_error, "source_path", None)
        if source is None or not source.is_file():
            source = config_path
        raise BuildError(
            source, f"Query '{exc.alias}' failed: {exc.message}", exc
        ) from exc

    engine = TemplateEngine(metadata, project_root / config["templates_dir"])
    try:
        bio = render_bio(
            data["site"],
            data["avatar"]["fixed"],
            env=engine.env,
            logger=logger,
            debug=debug,
        )
    except ComponentError as exc:
        raise BuildError(config_path, str(exc), exc) from exc

    pages: list[Path] = []
    index_html = _render(config_path, engine.render_index, posts, bio)
    pages.append(_write_page(output_dir, "", index_html))
    for post in posts.sorted():
        newer, older = posts.neighbours(post)
        html = _render(post.path, engine.render_post, post, newer, older, bio)
        pages.append(_write_page(output_dir, post.slug, html))
    not_found = _render(config_path, engine.render_not_found, bio)
    (output_dir / "404.html").write_text(not_found, encoding="utf-8")
    pages.append(output_dir / "404.html")

    AssetPipeline(project_root / config["static_dir"], output_dir).run(posts)
    feeds = create_default_feed_registry().generate_all(output_dir, posts, metadata)

    logger.debug("Built %d posts into %s", len(posts), output_dir)
    return BuildResult(
        posts=list(posts.sorted()),
        output_dir=output_dir,
        metadata=metadata,
        pages=pages,
        feeds=feeds,
    )


def _render(source_path: Path, render, *args) -> str:
    """Call a render function, converting template failures to BuildError."""
    try:
        return render(*args)
    except TemplateSyntaxError as exc:
        raise BuildError(
            Path(exc.filename) if exc.filename else source_path,
            f"Template syntax error on line {exc.lineno}: {exc.message}",
            exc,
        ) from exc
    except TemplateError as exc:
        raise BuildError(source_path, _format_error_message(exc), exc) from exc


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message."""
    error_type = type(exc).__name__
    if error_type == "UndefinedError":
        return f"Undefined variable: {exc}"
    if error_type == "TemplateNotFound":
        return f"Template not found: {exc}"
    return f"{error_type}: {exc}"


def _write_page(output_dir: Path, slug: str, rendered: str) -> Path:
    """Write a rendered page as ``<slug>/index.html``."""
    target_dir = output_dir / slug if slug else output_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    html_path = target_dir / "index.html"
    html_path.write_text(rendered, encoding="utf-8")
    return html_path
