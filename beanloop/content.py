"""Content store for beanloop.

Posts are Markdown files under the content directory, each starting with a
YAML front matter block (``title``, ``date``, ``description``). This module
discovers the files, validates their front matter, renders the bodies and
checks that no two posts claim the same slug.

Key classes:
- Post: Dataclass representing a blog post.
- FileContentLoader: Discovers Markdown files in the content directory.
- PostBuilder: Builds a Post from one source file.
- ContentProcessor: Facade that loads every post and checks for conflicts.
- SlugConflictError: Raised when two files resolve to the same slug.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .extractors import (
    CompositeMetadataExtractor,
    ContentError,
    default_metadata_extractor,
)
from .logging import get_logger
from .renderers import MarkdownRenderer, default_markdown_renderer
from .utils import is_internal_path, is_markdown, slug_from_path

__all__ = [
    "ContentError",
    "ContentProcessor",
    "FileContentLoader",
    "Post",
    "PostBuilder",
    "SlugConflictError",
    "detect_slug_conflicts",
]

logger = get_logger("content")


class SlugConflictError(ContentError):
    """Two content files resolve to the same slug.

    Attributes:
        slug: The contested slug.
        paths: Source paths that claim it, in discovery order.
    """

    def __init__(self, slug: str, paths: list[Path]):
        self.slug = slug
        self.paths = paths
        others = ", ".join(str(p) for p in paths[:-1])
        super().__init__(
            paths[-1],
            f"Slug '{slug}' is already used by {others}",
            "slug",
        )


@dataclass
class Post:
    """A blog post loaded from the content store.

    Attributes:
        title: Title from front matter.
        date: Publish date (timezone-aware, UTC).
        description: Front matter description, or the excerpt.
        body: Raw Markdown body after the front matter.
        content: Rendered HTML body.
        excerpt: First prose paragraph of the body as plain text.
        slug: Slug derived from the file path.
        url: Root-relative URL of the post page.
        path: Path to the source file.
        draft: Whether the post is a draft.
        frontmatter: Raw front matter mapping.
    """

    title: str
    date: datetime
    description: str
    body: str
    content: str
    excerpt: str
    slug: str
    url: str
    path: Path
    draft: bool = False
    frontmatter: dict[str, Any] = field(default_factory=dict)

    @property
    def is_bundle(self) -> bool:
        """True when the post lives in its own folder as ``index.md``."""
        return self.path.stem.lstrip("_") == "index"


class FileContentLoader:
    """Discovers Markdown files in the content directory.

    Attributes:
        content_dir: Directory containing post sources.
    """

    def __init__(self, content_dir: Path):
        self.content_dir = content_dir

    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """List Markdown files in a stable order.

        Files or folders whose name starts with ``_`` are drafts and are
        skipped unless ``include_drafts`` is set.

        Args:
            include_drafts: Whether to include underscore-prefixed files.

        Returns:
            Sorted list of Markdown file paths.
        """
        files: list[Path] = []
        for path in sorted(self.content_dir.rglob("*")):
            if path.is_dir() or not is_markdown(path):
                continue
            rel = path.relative_to(self.content_dir)
            if is_internal_path(rel) and not include_drafts:
                continue
            files.append(path)
        return files


class PostBuilder:
    """Builds Post objects from source files.

    Attributes:
        content_dir: Directory containing post sources.
        renderer: Markdown renderer.
        metadata_extractor: Front matter extractor chain.
    """

    def __init__(
        self,
        content_dir: Path,
        renderer: MarkdownRenderer | None = None,
        metadata_extractor: CompositeMetadataExtractor | None = None,
    ):
        self.content_dir = content_dir
        self.renderer = renderer or default_markdown_renderer
        self.metadata_extractor = metadata_extractor or default_metadata_extractor

    def build(self, path: Path) -> Post:
        """Build a Post from a Markdown file.

        Args:
            path: Path to the source file.

        Returns:
            Post object.

        Raises:
            ContentError: If the front matter is missing or malformed, or
                no slug can be derived from the path.
        """
        rel = path.relative_to(self.content_dir)
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ContentError(path, f"File is not valid UTF-8: {exc}") from exc

        metadata = self.metadata_extractor.extract(raw, path)
        slug = slug_from_path(rel)
        if not slug:
            raise ContentError(path, "Cannot derive a slug from the file path", "slug")

        body = metadata.get("body", raw)
        return Post(
            title=metadata["title"],
            date=metadata["date"],
            description=metadata.get("description", ""),
            body=body,
            content=self.renderer.render(body),
            excerpt=metadata.get("excerpt", ""),
            slug=slug,
            url=f"/{slug}/",
            path=path,
            draft=metadata.get("draft", False) or is_internal_path(rel),
            frontmatter=metadata.get("frontmatter", {}),
        )


def detect_slug_conflicts(posts: Iterable[Post]) -> None:
    """Check that every post has a unique slug.

    Posts that share a title but not a slug are kept and logged as
    likely editorial copies.

    Args:
        posts: Posts to check.

    Raises:
        SlugConflictError: On the first slug claimed by two files.
    """
    by_slug: dict[str, Path] = {}
    by_title: dict[str, Post] = {}
    for post in posts:
        if post.slug in by_slug:
            raise SlugConflictError(post.slug, [by_slug[post.slug], post.path])
        by_slug[post.slug] = post.path

        key = post.title.casefold()
        if key in by_title:
            logger.warning(
                "Posts %s and %s share the title %r; mark one as a draft if it is a copy",
                by_title[key].path,
                post.path,
                post.title,
            )
        else:
            by_title[key] = post


class ContentProcessor:
    """Facade for loading every post in the content store.

    Attributes:
        content_dir: Directory containing post sources.
    """

    def __init__(
        self,
        content_dir: Path,
        content_loader: FileContentLoader | None = None,
        post_builder: PostBuilder | None = None,
    ):
        self.content_dir = content_dir
        self._content_loader = content_loader or FileContentLoader(content_dir)
        self._post_builder = post_builder or PostBuilder(content_dir)

    def load(self, include_drafts: bool = False) -> list[Post]:
        """Load, validate and de-duplicate all posts.

        Args:
            include_drafts: Whether to include drafts (``_`` prefix or
                ``draft: true``).

        Returns:
            Posts in discovery order.

        Raises:
            ContentError: For the first invalid file.
            SlugConflictError: If two posts share a slug.
        """
        if not self.content_dir.is_dir():
            raise ContentError(self.content_dir, "Content directory does not exist")
        posts: list[Post] = []
        for path in self._content_loader.iter_files(include_drafts):
            post = self._post_builder.build(path)
            if post.draft and not include_drafts:
                logger.debug("Skipping draft %s", path)
                continue
            posts.append(post)
        detect_slug_conflicts(posts)
        logger.debug("Loaded %d posts from %s", len(posts), self.content_dir)
        return posts
