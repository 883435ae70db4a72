"""Front matter extraction and validation for beanloop.

Each extractor pulls one kind of metadata out of a post source and returns
a dictionary fragment; CompositeMetadataExtractor merges them. Invalid or
missing required fields raise ContentError instead of being defaulted.

Key classes:
- FrontmatterExtractor: Splits YAML front matter from the Markdown body.
- TitleExtractor: Requires a non-empty string ``title``.
- DateExtractor: Requires a parsable ``date``.
- DescriptionExtractor: Uses ``description`` or falls back to the excerpt.
- DraftExtractor: Reads the ``draft`` flag.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any

import yaml

from .utils import first_paragraph

FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


class ContentError(Exception):
    """Error in a content file, raised at build time.

    Attributes:
        source_path: Path to the offending content file.
        message: Human-readable error message.
        field: Front matter field involved, if any.
    """

    def __init__(self, source_path: Path, message: str, field: str | None = None):
        self.source_path = source_path
        self.message = message
        self.field = field
        super().__init__(f"{source_path}: {message}")


def extract_frontmatter(text: str, path: Path) -> tuple[dict[str, Any], str]:
    """Split YAML front matter from content.

    Args:
        text: Raw file content.
        path: Source path, used in error messages.

    Returns:
        Tuple of (front matter mapping, remaining body). A file without a
        front matter block yields an empty mapping.

    Raises:
        ContentError: If the block is not valid YAML or not a mapping.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        raise ContentError(path, f"Malformed front matter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ContentError(path, "Front matter must be a mapping of keys to values")
    return data, text[match.end() :]


def parse_date(value: Any) -> datetime | None:
    """Normalise a front matter date to a timezone-aware UTC datetime.

    Accepts YAML dates and datetimes as well as ISO-8601 strings. Naive
    values are taken to be UTC.

    Args:
        value: Raw front matter value.

    Returns:
        Aware datetime, or None if the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class FrontmatterExtractor:
    """Extracts YAML front matter and the remaining body."""

    def extract(self, content: str, path: Path, meta: dict[str, Any]) -> dict[str, Any]:
        frontmatter, body = extract_frontmatter(content, path)
        return {"frontmatter": frontmatter, "body": body}


class TitleExtractor:
    """Requires a non-empty string ``title`` in the front matter."""

    def extract(self, content: str, path: Path, meta: dict[str, Any]) -> dict[str, Any]:
        frontmatter = meta.get("frontmatter", {})
        if "title" not in frontmatter or frontmatter["title"] is None:
            raise ContentError(path, "Missing required front matter field 'title'", "title")
        title = frontmatter["title"]
        if not isinstance(title, (str, int, float)) or isinstance(title, bool):
            raise ContentError(path, "Front matter field 'title' must be text", "title")
        title = str(title).strip()
        if not title:
            raise ContentError(path, "Front matter field 'title' is empty", "title")
        return {"title": title}


class DateExtractor:
    """Requires a parsable ``date`` in the front matter."""

    def extract(self, content: str, path: Path, meta: dict[str, Any]) -> dict[str, Any]:
        frontmatter = meta.get("frontmatter", {})
        if frontmatter.get("date") is None:
            raise ContentError(path, "Missing required front matter field 'date'", "date")
        parsed = parse_date(frontmatter["date"])
        if parsed is None:
            raise ContentError(
                path,
                f"Front matter field 'date' is not a valid date: {frontmatter['date']!r}",
                "date",
            )
        return {"date": parsed}


class DescriptionExtractor:
    """Extracts the description and excerpt.

    The excerpt is always the first prose paragraph of the body. The
    description is the front matter value when present, else the excerpt.
    """

    def extract(self, content: str, path: Path, meta: dict[str, Any]) -> dict[str, Any]:
        frontmatter = meta.get("frontmatter", {})
        excerpt = first_paragraph(meta.get("body", content))
        description = frontmatter.get("description")
        if description is None:
            return {"description": excerpt, "excerpt": excerpt}
        if not isinstance(description, str):
            raise ContentError(
                path, "Front matter field 'description' must be text", "description"
            )
        return {"description": description.strip(), "excerpt": excerpt}


class DraftExtractor:
    """Reads the optional boolean ``draft`` flag."""

    def extract(self, content: str, path: Path, meta: dict[str, Any]) -> dict[str, Any]:
        draft = meta.get("frontmatter", {}).get("draft", False)
        if not isinstance(draft, bool):
            raise ContentError(path, "Front matter field 'draft' must be true or false", "draft")
        return {"draft": draft}


class CompositeMetadataExtractor:
    """Runs extractors in order, feeding each the metadata gathered so far."""

    def __init__(self, extractors: list | None = None):
        if extractors is None:
            self._extractors = [
                FrontmatterExtractor(),
                TitleExtractor(),
                DateExtractor(),
                DescriptionExtractor(),
                DraftExtractor(),
            ]
        else:
            self._extractors = list(extractors)

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        """Extract all metadata from content.

        Args:
            content: Raw file content.
            path: Path to the source file.

        Returns:
            Merged metadata dictionary.

        Raises:
            ContentError: If any extractor rejects the content.
        """
        result: dict[str, Any] = {}
        for extractor in self._extractors:
            result.update(extractor.extract(content, path, result))
        return result


default_metadata_extractor = CompositeMetadataExtractor()
