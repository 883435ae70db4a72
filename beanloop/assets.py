"""Asset store and image variants for beanloop.

Binary files (logos, post images) live in the assets directory or beside a
post. Components never embed files: they receive an AssetReference located
by a path pattern, plus derived FixedImage variants written into the output
tree at build time.

Key classes:
- AssetReference: A located source file.
- FixedImage: A fixed-size presentation variant of an image asset.
- AssetStore: Finds assets by regular expression on their absolute path.
- ImageProcessor: Derives fixed-size variants with Pillow.
- AssetPipeline: Copies static files and post-local assets into the output.
"""

from __future__ import annotations

import hashlib
import re
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image, ImageOps

from .logging import get_logger
from .utils import is_markdown

if TYPE_CHECKING:
    from .content import Post

logger = get_logger("assets")

# Pixel densities emitted in srcset, as in responsive fixed images.
DENSITIES = (1, 1.5, 2)


class AssetError(Exception):
    """Error raised when an asset cannot be processed.

    Attributes:
        source_path: Path to the asset file.
        message: Human-readable error message.
    """

    def __init__(self, source_path: Path, message: str):
        self.source_path = source_path
        self.message = message
        super().__init__(f"{source_path}: {message}")


class AssetNotFoundError(AssetError):
    """Error raised when no asset matches a lookup pattern.

    Attributes:
        pattern: The regular expression that was searched for.
        searched_dir: Directory that was searched.
    """

    def __init__(self, pattern: str, searched_dir: Path):
        self.pattern = pattern
        self.searched_dir = searched_dir
        super().__init__(
            searched_dir, f"No asset matches /{pattern}/ under {searched_dir}"
        )


@dataclass(frozen=True)
class AssetReference:
    """A source file in the asset store.

    Attributes:
        path: Absolute path to the file.
        relative_path: Path relative to the asset store root.
    """

    path: Path
    relative_path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class FixedImage:
    """A fixed-size variant of an image asset.

    Attributes:
        width: Declared width in CSS pixels.
        height: Declared height in CSS pixels.
        src: URL of the 1x file.
        srcset: ``srcset`` value covering every generated density.
        files: Output files written for this variant.
    """

    width: int
    height: int
    src: str
    srcset: str
    files: tuple[Path, ...] = field(default_factory=tuple)


class AssetStore:
    """Finds assets by regular expression.

    Attributes:
        assets_dir: Root directory of the asset store.
    """

    def __init__(self, assets_dir: Path):
        self.assets_dir = assets_dir

    def find(self, pattern: str) -> AssetReference:
        """Return the first asset whose absolute path matches ``pattern``.

        A GraphQL-style pattern wrapped in slashes (``/logo.png/``) is
        accepted. Files are checked in sorted order.

        Args:
            pattern: Regular expression searched in the POSIX absolute path.

        Returns:
            AssetReference for the first match.

        Raises:
            AssetError: If the pattern is not a valid regular expression.
            AssetNotFoundError: If nothing matches.
        """
        if len(pattern) > 1 and pattern.startswith("/") and pattern.endswith("/"):
            pattern = pattern[1:-1]
        try:
            regex = re.compile(pattern)
        except re.error as exc:
            raise AssetError(
                self.assets_dir, f"Invalid asset pattern /{pattern}/: {exc}"
            ) from exc
        root = self.assets_dir.resolve()
        if root.is_dir():
            matches = [
                p
                for p in sorted(root.rglob("*"))
                if p.is_file() and regex.search(p.as_posix())
            ]
            if matches:
                if len(matches) > 1:
                    logger.debug(
                        "Pattern /%s/ matched %d assets; using %s",
                        pattern,
                        len(matches),
                        matches[0],
                    )
                return AssetReference(matches[0], matches[0].relative_to(root))
        raise AssetNotFoundError(pattern, self.assets_dir)


class ImageProcessor:
    """Derives fixed-size image variants into the output directory.

    Variant files are named after a digest of the source bytes, so the
    same input always produces the same URL.

    Attributes:
        output_dir: Build output directory.
    """

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def fixed(self, asset: AssetReference, width: int, height: int) -> FixedImage:
        """Create a cropped, resized variant at exactly ``width`` x ``height``.

        Higher density files (1.5x, 2x) are added when the source is large
        enough to provide them without upscaling.

        Args:
            asset: Source image.
            width: Target width in pixels.
            height: Target height in pixels.

        Returns:
            FixedImage describing the generated files.

        Raises:
            AssetError: If the dimensions are invalid or the file is not a
                readable raster image.
        """
        if width <= 0 or height <= 0:
            raise AssetError(asset.path, f"Invalid fixed size {width}x{height}")
        try:
            data = asset.path.read_bytes()
            digest = hashlib.sha1(data).hexdigest()[:16]
            with Image.open(asset.path) as img:
                img.load()
                return self._write_variants(img, asset, digest, width, height)
        except OSError as exc:
            raise AssetError(asset.path, f"Cannot read image: {exc}") from exc

    def _write_variants(
        self,
        img: Image.Image,
        asset: AssetReference,
        digest: str,
        width: int,
        height: int,
    ) -> FixedImage:
        stem, suffix = asset.path.stem, asset.path.suffix.lower()
        fmt = img.format
        target_dir = self.output_dir / "static" / digest
        target_dir.mkdir(parents=True, exist_ok=True)

        entries: list[str] = []
        files: list[Path] = []
        src = ""
        for density in DENSITIES:
            w, h = round(width * density), round(height * density)
            if density != 1 and (img.width < w or img.height < h):
                continue
            name = f"{stem}-{w}x{h}{suffix}"
            dest = target_dir / name
            if not dest.exists():
                fitted = ImageOps.fit(img, (w, h), method=Image.LANCZOS)
                if fmt == "JPEG" and fitted.mode not in ("RGB", "L"):
                    fitted = fitted.convert("RGB")
                fitted.save(dest, format=fmt)
            url = f"/static/{digest}/{name}"
            if density == 1:
                src = url
            entries.append(f"{url} {density:g}x")
            files.append(dest)

        logger.debug("Derived %d variants of %s at %dx%d", len(files), asset.name, width, height)
        return FixedImage(
            width=width,
            height=height,
            src=src,
            srcset=", ".join(entries),
            files=tuple(files),
        )


class AssetPipeline:
    """Copies static files and post-local assets into the output tree.

    Attributes:
        static_dir: Directory copied verbatim to the output root.
        output_dir: Build output directory.
    """

    def __init__(self, static_dir: Path, output_dir: Path):
        self.static_dir = static_dir
        self.output_dir = output_dir

    def run(self, posts: Iterable[Post]) -> list[Path]:
        """Copy assets for the given posts.

        Args:
            posts: Posts being published.

        Returns:
            Output paths written.
        """
        written: list[Path] = []
        if self.static_dir.is_dir():
            for item in sorted(self.static_dir.rglob("*")):
                if item.is_file():
                    dest = self.output_dir / item.relative_to(self.static_dir)
                    written.append(self._copy(item, dest))
        for post in posts:
            if not post.is_bundle:
                continue
            folder = post.path.parent
            for item in sorted(folder.rglob("*")):
                if item.is_file() and not is_markdown(item):
                    dest = self.output_dir / post.slug / item.relative_to(folder)
                    written.append(self._copy(item, dest))
        return written

    def _copy(self, source: Path, dest: Path) -> Path:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
        return dest
