"""Feed generation for beanloop.

Generates ``rss.xml`` and ``sitemap.xml`` from the published posts. Both
need absolute URLs and are skipped when the site has no ``site_url``.

Classes:
    FeedGenerator: Base class for feed generators.
    SitemapGenerator: Generates sitemap.xml files.
    RSSGenerator: Generates RSS 2.0 feeds with full post content.
    FeedRegistry: Runs a set of generators.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from .html_utils import absolutize_html_urls, escape_xml, join_root_url

if TYPE_CHECKING:
    from .collections import PostCollection
    from .config import SiteMetadata

RFC822 = "%a, %d %b %Y %H:%M:%S +0000"


class FeedGenerator(ABC):
    """Base class for feed generators."""

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename for this feed."""
        ...

    @abstractmethod
    def generate(self, posts: PostCollection, metadata: SiteMetadata) -> str | None:
        """Generate feed content.

        Args:
            posts: Published posts.
            metadata: Site metadata.

        Returns:
            Feed content, or None if the feed cannot be generated.
        """
        ...

    def write(self, output_dir: Path, posts: PostCollection, metadata: SiteMetadata) -> bool:
        """Generate and write the feed; return False if it was skipped."""
        content = self.generate(posts, metadata)
        if content is None:
            return False
        (output_dir / self.filename).write_text(content, encoding="utf-8")
        return True


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml listing the index and every post."""

    @property
    def filename(self) -> str:
        return "sitemap.xml"

    def generate(self, posts: PostCollection, metadata: SiteMetadata) -> str | None:
        base_url = metadata.site_url
        if not base_url:
            return None
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            f"  <url><loc>{escape_xml(join_root_url(base_url, '/'))}</loc></url>",
        ]
        for post in posts.sorted():
            loc = escape_xml(join_root_url(base_url, post.url))
            lastmod = post.date.strftime("%Y-%m-%d")
            lines.append(f"  <url><loc>{loc}</loc><lastmod>{lastmod}</lastmod></url>")
        lines.append("</urlset>")
        return "\n".join(lines) + "\n"


class RSSGenerator(FeedGenerator):
    """Generates an RSS 2.0 feed, newest posts first.

    Each item carries the description and the full post HTML, with
    root-relative links made absolute.
    """

    @property
    def filename(self) -> str:
        return "rss.xml"

    def generate(self, posts: PostCollection, metadata: SiteMetadata) -> str | None:
        base_url = metadata.site_url
        if not base_url:
            return None
        ordered = posts.sorted()
        rss = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">',
            "<channel>",
            f"<title>{escape_xml(metadata.title)}</title>",
            f"<link>{escape_xml(join_root_url(base_url, '/'))}</link>",
            f"<description>{escape_xml(metadata.description)}</description>",
        ]
        if ordered:
            rss.append(f"<lastBuildDate>{ordered[0].date.strftime(RFC822)}</lastBuildDate>")
        for post in ordered:
            link = escape_xml(join_root_url(base_url, post.url))
            html = absolutize_html_urls(post.content, base_url).replace("]]>", "]]]]><![CDATA[>")
            rss.append(
                f"<item><title>{escape_xml(post.title)}</title><link>{link}</link>"
                f'<guid isPermaLink="true">{link}</guid>'
                f"<description>{escape_xml(post.description or post.title)}</description>"
                f"<content:encoded><![CDATA[{html}]]></content:encoded>"
                f"<pubDate>{post.date.strftime(RFC822)}</pubDate></item>"
            )
        rss.append("</channel>")
        rss.append("</rss>")
        return "\n".join(rss) + "\n"


class FeedRegistry:
    """Runs every registered feed generator during a build."""

    def __init__(self) -> None:
        self._generators: list[FeedGenerator] = []

    def register(self, generator: FeedGenerator) -> None:
        self._generators.append(generator)

    def generate_all(
        self, output_dir: Path, posts: PostCollection, metadata: SiteMetadata
    ) -> list[str]:
        """Generate all registered feeds.

        Returns:
            Filenames that were written.
        """
        return [
            generator.filename
            for generator in self._generators
            if generator.write(output_dir, posts, metadata)
        ]


def create_default_feed_registry() -> FeedRegistry:
    """Create a registry with the sitemap and RSS generators."""
    registry = FeedRegistry()
    registry.register(SitemapGenerator())
    registry.register(RSSGenerator())
    return registry
