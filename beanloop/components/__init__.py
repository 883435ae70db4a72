"""Presentational components rendered from resolved build-time data."""

from .bio import BIO_QUERY, ComponentError, bio_query, render_bio

__all__ = ["BIO_QUERY", "ComponentError", "bio_query", "render_bio"]
