"""Site configuration for beanloop.

Configuration lives in ``beanloop.yaml`` at the project root. Build settings
sit at the top level and the author/site record sits under ``site_metadata``::

    site_metadata:
      title: Beanloop Blog
      author: Beanloop
      site_url: https://blog.beanloop.se
      social:
        twitter: beanloop
    content_dir: content/blog
    output_dir: public

Key names:
- load_config: Loads the YAML file over DEFAULT_CONFIG.
- SiteMetadata: Validated, read-only site/author record.
- ConfigError: Raised for unreadable or incomplete configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "beanloop.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "content_dir": "content/blog",
    "assets_dir": "content/assets",
    "static_dir": "static",
    "output_dir": "public",
    "templates_dir": "templates",
    "avatar_pattern": r"beanloop_symbol_positiv\.png$",
    "avatar_width": 50,
    "avatar_height": 50,
    "debug": False,
    "site_metadata": {},
}

_PATH_KEYS = ("content_dir", "assets_dir", "static_dir", "output_dir", "templates_dir")


class ConfigError(Exception):
    """Error raised for an invalid ``beanloop.yaml``.

    Attributes:
        source_path: Path to the configuration file.
        message: Human-readable error message.
    """

    def __init__(self, source_path: Path, message: str):
        self.source_path = source_path
        self.message = message
        super().__init__(f"{source_path}: {message}")


@dataclass(frozen=True)
class SiteMetadata:
    """Process-wide site and author record, read once per build.

    Attributes:
        title: Site title used in page titles and feeds.
        author: Author or organisation name shown in the bio.
        description: Site description for meta tags and feeds.
        site_url: Canonical base URL; feeds are skipped without it.
        social: Mapping of platform name to handle (e.g. ``twitter``).
        bio: Optional tagline rendered after the author's name.
    """

    title: str
    author: str
    description: str = ""
    site_url: str = ""
    social: dict[str, str] = field(default_factory=dict)
    bio: str = ""

    @classmethod
    def from_config(
        cls, config: dict[str, Any], source_path: Path | None = None
    ) -> SiteMetadata:
        """Build and validate the record from a loaded configuration.

        Args:
            config: Configuration dictionary from load_config.
            source_path: Config file path used in error messages.

        Returns:
            SiteMetadata instance.

        Raises:
            ConfigError: If required fields are missing or malformed.
        """
        source = source_path or Path(CONFIG_FILENAME)
        raw = config.get("site_metadata") or {}
        if not isinstance(raw, dict):
            raise ConfigError(source, "site_metadata must be a mapping")

        values: dict[str, Any] = {}
        for key in ("title", "author"):
            value = raw.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(
                    source, f"site_metadata.{key} is required and must be a string"
                )
            values[key] = value.strip()
        for key in ("description", "site_url", "bio"):
            value = raw.get(key, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ConfigError(source, f"site_metadata.{key} must be a string")
            values[key] = value.strip()

        social = raw.get("social") or {}
        if not isinstance(social, dict):
            raise ConfigError(source, "site_metadata.social must be a mapping")
        values["social"] = {str(k): str(v).lstrip("@") for k, v in social.items() if v}
        return cls(**values)

    def as_dict(self) -> dict[str, Any]:
        """Return the record as a JSON-shaped dictionary."""
        return {
            "title": self.title,
            "author": self.author,
            "description": self.description,
            "site_url": self.site_url,
            "social": dict(self.social),
            "bio": self.bio,
        }


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from beanloop.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the file cannot be parsed, is not a mapping, or a
            build setting has the wrong type.
    """
    config_path = project_root / CONFIG_FILENAME
    config = dict(DEFAULT_CONFIG)
    if not config_path.exists():
        return config
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(config_path, f"Invalid YAML: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(config_path, "Top level must be a mapping")
    config.update(loaded)
    _validate_settings(config, config_path)
    return config


def _validate_settings(config: dict[str, Any], config_path: Path) -> None:
    """Check the types of the top-level build settings."""
    for key in _PATH_KEYS + ("avatar_pattern",):
        value = config.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(config_path, f"{key} must be a non-empty string")
    for key in ("avatar_width", "avatar_height"):
        value = config.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(
                config_path, f"{key} must be a positive integer, got {value!r}"
            )
    if not isinstance(config.get("debug"), bool):
        raise ConfigError(config_path, "debug must be true or false")
