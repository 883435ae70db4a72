"""Build-time content resolution for beanloop.

Components declare the data they need as a mapping of aliases to query
objects; QueryResolver answers it before rendering, so components receive
plain data instead of reaching into global state.

    BIO_QUERY = {
        "site": SiteQuery(fields=("author", "social.twitter")),
        "avatar": FileQuery(r"logo\\.png$", fixed=(50, 50)),
    }

resolves to::

    {
        "site": {"author": "...", "social": {"twitter": "..."}},
        "avatar": {"asset": AssetReference(...), "fixed": FixedImage(...)},
    }

Key classes:
- SiteQuery: Selects dotted field paths from SiteMetadata.
- FileQuery: Locates an asset by pattern, optionally with a fixed variant.
- QueryResolver: Resolves a query mapping against metadata and assets.
- QueryError: Raised for any unresolvable part of a query.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from .assets import AssetError, AssetStore, ImageProcessor
from .config import SiteMetadata
from .logging import get_logger

logger = get_logger("query")


class QueryError(Exception):
    """Error raised when part of a query cannot be resolved.

    Attributes:
        alias: Alias of the failing query entry.
        message: Human-readable error message.
        original_error: Underlying exception, if any.
    """

    def __init__(self, alias: str, message: str, original_error: Exception | None = None):
        self.alias = alias
        self.message = message
        self.original_error = original_error
        super().__init__(f"{alias}: {message}")


@dataclass(frozen=True)
class SiteQuery:
    """Selects fields from the site metadata.

    Attributes:
        fields: Dotted field paths such as ``author`` or ``social.twitter``.
        optional: Dotted field paths that are left out when empty.
    """

    fields: tuple[str, ...]
    optional: tuple[str, ...] = ()


@dataclass(frozen=True)
class FileQuery:
    """Locates a file in the asset store.

    Attributes:
        pattern: Regular expression matched against the absolute path.
        fixed: Optional ``(width, height)`` of a derived image variant.
    """

    pattern: str
    fixed: tuple[int, int] | None = None


Query = Union[SiteQuery, FileQuery]


class QueryResolver:
    """Resolves component queries against site metadata and the asset store.

    Attributes:
        metadata: Site metadata record.
        asset_store: Store used for file lookups.
        image_processor: Processor used for fixed image variants.
    """

    def __init__(
        self,
        metadata: SiteMetadata,
        asset_store: AssetStore,
        image_processor: ImageProcessor,
    ):
        self.metadata = metadata
        self.asset_store = asset_store
        self.image_processor = image_processor

    def resolve(self, query: Mapping[str, Query]) -> dict[str, Any]:
        """Resolve every aliased entry in ``query``.

        Args:
            query: Mapping of alias to SiteQuery or FileQuery.

        Returns:
            Dictionary shaped like the query.

        Raises:
            QueryError: If any field or file cannot be resolved.
        """
        result: dict[str, Any] = {}
        for alias, entry in query.items():
            if isinstance(entry, SiteQuery):
                result[alias] = self._resolve_site(alias, entry)
            elif isinstance(entry, FileQuery):
                result[alias] = self._resolve_file(alias, entry)
            else:
                raise QueryError(alias, f"Unsupported query type {type(entry).__name__}")
        return result

    def _resolve_site(self, alias: str, query: SiteQuery) -> dict[str, Any]:
        source = self.metadata.as_dict()
        selected: dict[str, Any] = {}
        for path in query.fields + query.optional:
            required = path in query.fields
            value: Any = source
            for key in path.split("."):
                if not isinstance(value, Mapping) or key not in value:
                    value = None
                    break
                value = value[key]
            if value is None or value == "":
                if not required:
                    continue
                raise QueryError(alias, f"Site metadata field '{path}' is missing or empty")
            target = selected
            *parents, leaf = path.split(".")
            for key in parents:
                target = target.setdefault(key, {})
            target[leaf] = value
        return selected

    def _resolve_file(self, alias: str, query: FileQuery) -> dict[str, Any]:
        try:
            asset = self.asset_store.find(query.pattern)
            fixed = None
            if query.fixed is not None:
                width, height = query.fixed
                fixed = self.image_processor.fixed(asset, width, height)
        except AssetError as exc:
            raise QueryError(alias, exc.message, exc) from exc
        logger.debug("Resolved %s to %s", alias, asset.relative_path)
        return {"asset": asset, "fixed": fixed}
