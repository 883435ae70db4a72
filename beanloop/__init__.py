"""Beanloop blog generator.

This package builds the Beanloop blog from Markdown posts with YAML front matter
into a static HTML site. Content is loaded and validated, site metadata and
assets are resolved by build-time queries, and Jinja2 components render the
resolved data into pages.

The main entry point is the CLI module, which provides commands for scaffolding
a blog, creating posts, validating content and building the site.
"""

__all__ = ["__version__"]
__version__ = "0.2.0"
