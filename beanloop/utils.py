"""Utility functions for beanloop.

String and path helpers shared by the content, asset and CLI modules.

Key functions:
    slugify: Convert filenames to URL slugs.
    slug_from_path: Derive a post slug from its path in the content store.
    first_paragraph: Plain-text first paragraph of a Markdown body.
    is_markdown: Check if a path is a Markdown file.
    is_internal_path: Check if a path has an underscore-prefixed component.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-")


def strip_date_prefix(name: str) -> str:
    """Drop a leading ``YYYY-MM-DD-`` prefix from a filename stem.

    Examples:
        >>> strip_date_prefix("2019-03-01-hello-world")
        'hello-world'
    """
    return DATE_PREFIX_RE.sub("", name)


def slugify(name: str) -> str:
    """Convert a filename stem to a slug, dropping any date prefix.

    Args:
        name: Filename stem.

    Returns:
        URL-friendly slug, or an empty string if nothing usable is left.
    """
    cleaned = strip_date_prefix(name)
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    return cleaned.strip("-").lower()


def slug_from_path(rel: Path) -> str:
    """Derive a post slug from a path relative to the content directory.

    A post stored as ``hello-world/index.md`` and one stored as
    ``hello-world.md`` both get the slug ``hello-world``. Nested folders
    are kept as slash-separated segments.

    Args:
        rel: Path of the Markdown file relative to the content directory.

    Returns:
        Slug string without leading or trailing slashes.
    """
    parts = list(rel.parent.parts)
    stem = rel.stem
    if stem.lstrip("_") != "index":
        parts.append(stem)
    segments = [slugify(part.lstrip("_")) for part in parts]
    return "/".join(s for s in segments if s)


def first_paragraph(text: str, limit: int = 160) -> str:
    """Extract the first prose paragraph from Markdown as plain text.

    Headings, images, code fences and HTML blocks are skipped. Inline
    Markdown emphasis and link syntax is flattened.

    Args:
        text: Markdown body.
        limit: Maximum character length of result.

    Returns:
        Cleaned first paragraph, truncated to ``limit`` characters.
    """
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    for para in paragraphs:
        if para.startswith(("#", "![", "```", "<", "---", ">")):
            continue
        para = re.sub(r"!\[[^\]]*\]\([^)]*\)", "", para)
        para = re.sub(r"\[([^\]]*)\]\([^)]*\)", r"\1", para)
        para = re.sub(r"[*_`]+", "", para)
        collapsed = " ".join(para.split())
        if collapsed:
            return collapsed[:limit]
    return ""


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file (case-insensitive ``.md``)."""
    return path.suffix.lower() == ".md"


def is_internal_path(path: Path) -> bool:
    """Check if any component of a path starts with an underscore."""
    return any(part.startswith("_") for part in path.parts)


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)
