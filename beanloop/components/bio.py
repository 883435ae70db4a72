"""Author bio component.

Renders the attribution block shown on the index and under every post: the
site logo at a fixed size, the author's name and a link to the author's
Twitter profile. The component is a pure function of its inputs; the data
it needs is declared in BIO_QUERY and resolved before rendering.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from ..assets import FixedImage
from ..config import SiteMetadata
from ..logging import get_logger
from ..query import FileQuery, SiteQuery

TWITTER_URL = "https://twitter.com/"

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
_TEMPLATE_NAME = "components/bio.html.jinja"

_default_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATES_DIR)),
    autoescape=True,
)


class ComponentError(Exception):
    """Error raised when a component receives unusable data.

    Attributes:
        component: Name of the component.
        message: Human-readable error message.
    """

    def __init__(self, component: str, message: str):
        self.component = component
        self.message = message
        super().__init__(f"{component}: {message}")


def bio_query(avatar_pattern: str, width: int = 50, height: int = 50) -> dict:
    """Return the bio's data requirements for a given logo pattern."""
    return {
        "site": SiteQuery(fields=("author", "social.twitter"), optional=("bio",)),
        "avatar": FileQuery(avatar_pattern, fixed=(width, height)),
    }


BIO_QUERY = bio_query(r"beanloop_symbol_positiv\.png$")


def render_bio(
    metadata: SiteMetadata | Mapping[str, Any],
    avatar: FixedImage,
    *,
    alt: str | None = None,
    env: Environment | None = None,
    logger: logging.Logger | None = None,
    debug: bool = False,
) -> Markup:
    """Render the bio block.

    Args:
        metadata: Site metadata, or the ``site`` part of a resolved query.
            Needs ``author`` and ``social.twitter``; ``bio`` is optional.
        avatar: Fixed-size logo variant.
        alt: Alternative text for the logo; defaults to "<author> logotype".
        env: Jinja environment used to look up the template, allowing
            project overrides.
        logger: Logger for diagnostics; defaults to the module logger.
        debug: Log the resolved avatar when true.

    Returns:
        Markup for the bio.

    Raises:
        ComponentError: If the metadata or avatar is absent or malformed.
    """
    if isinstance(metadata, SiteMetadata):
        metadata = metadata.as_dict()
    if not isinstance(metadata, Mapping):
        raise ComponentError("bio", "site metadata is missing")

    author = metadata.get("author")
    if not isinstance(author, str) or not author.strip():
        raise ComponentError("bio", "site metadata has no author")
    social = metadata.get("social")
    handle = social.get("twitter") if isinstance(social, Mapping) else None
    if not isinstance(handle, str) or not handle.strip():
        raise ComponentError("bio", "site metadata has no social.twitter handle")

    if not isinstance(avatar, FixedImage):
        raise ComponentError("bio", "avatar image is missing")
    if avatar.width <= 0 or avatar.height <= 0 or not avatar.src:
        raise ComponentError("bio", "avatar image has no usable size or source")

    alt_text = (alt or f"{author.strip()} logotype").strip()
    if not alt_text:
        raise ComponentError("bio", "avatar alternative text is empty")

    if debug:
        (logger or get_logger("components.bio")).debug("Bio avatar resolved: %r", avatar)

    tagline = metadata.get("bio") or ""
    template = (env or _default_env).get_template(_TEMPLATE_NAME)
    html = template.render(
        avatar=avatar,
        alt=alt_text,
        author=author.strip(),
        tagline=tagline.strip() if isinstance(tagline, str) else "",
        profile_url=f"{TWITTER_URL}{handle.strip().lstrip('@')}",
    )
    return Markup(html)
