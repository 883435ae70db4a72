"""Command-line interface for beanloop.

Commands:
- new: Scaffold a new blog project.
- build: Build the site into the output directory.
- check: Validate configuration and posts without writing output.
- post: Create a new post with front matter.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path

import click
import questionary
import yaml
from PIL import Image, ImageDraw

from . import __version__
from .config import ConfigError, load_config
from .logging import configure_logging
from .utils import slug_from_path, slugify

_SCAFFOLD_DIR = Path(__file__).parent / "scaffold"
_LOGO_PATH = Path("content") / "assets" / "beanloop_symbol_positiv.png"


@click.group()
@click.version_option(version=__version__, prog_name="beanloop")
def cli():
    """Beanloop blog generator."""


@cli.command()
@click.argument("name")
def new(name: str):
    """Scaffold a new blog project."""
    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    _scaffold(target)
    click.echo(f"New blog created at {target}")


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft posts")
@click.option(
    "--debug",
    is_flag=True,
    envvar="BEANLOOP_DEBUG",
    help="Log resolved component data and other diagnostics",
)
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Output directory (overrides beanloop.yaml output_dir)",
)
def build(drafts: bool, debug: bool, output: Path | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    if not debug:
        try:
            debug = load_config(project_root)["debug"]
        except ConfigError:
            # Reported with file context by build_site below.
            pass
    configure_logging(verbose=debug)
    from .build import BuildError, build_site

    try:
        result = build_site(
            project_root,
            include_drafts=drafts,
            debug=debug or None,
            output_dir_override=output.resolve() if output else None,
        )
    except BuildError as exc:
        _report_error(project_root, exc)
        raise SystemExit(1) from None
    click.echo(f"Built {len(result.posts)} posts into {result.output_dir}")


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft posts")
def check(drafts: bool):
    """Validate configuration and posts without writing output."""
    project_root = Path.cwd()
    configure_logging()
    from .build import BuildError, load_posts

    try:
        posts = load_posts(project_root, include_drafts=drafts)
    except BuildError as exc:
        _report_error(project_root, exc)
        raise SystemExit(1) from None
    for post in posts:
        click.echo(f"{post.date:%Y-%m-%d}  {post.url}  {post.title}")
    click.echo(f"{len(posts)} posts OK")


@cli.command()
@click.option("--title", help="Post title")
@click.option("--description", help="Short description shown in the listing")
@click.option("--draft", is_flag=True, help="Mark the post as a draft")
@click.option(
    "--no-folder",
    is_flag=True,
    help="Create <slug>.md instead of <slug>/index.md",
)
def post(title: str | None, description: str | None, draft: bool, no_folder: bool):
    """Create a new post with front matter."""
    project_root = Path.cwd()
    try:
        config = load_config(project_root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    content_dir = project_root / config["content_dir"]
    if not content_dir.is_dir():
        raise click.ClickException(
            f"No {config['content_dir']}/ directory found. Run this command from a blog project root."
        )

    if title is None:
        title = questionary.text(
            "Title:",
            validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
            style=_questionary_style(),
        ).ask()
        if title is None:
            raise click.Abort()
    if description is None:
        description = questionary.text(
            "Description:", style=_questionary_style()
        ).ask()
        if description is None:
            raise click.Abort()

    title = title.strip()
    slug = slugify(title)
    if not slug:
        raise click.ClickException(f"Cannot derive a slug from title {title!r}")

    existing = _existing_slugs(content_dir)
    if slug in existing:
        raise click.ClickException(
            f"A post with slug '{slug}' already exists: {existing[slug].relative_to(project_root)}"
        )

    target = content_dir / f"{slug}.md" if no_folder else content_dir / slug / "index.md"
    frontmatter = {
        "title": title,
        "date": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "description": description.strip(),
    }
    if draft:
        frontmatter["draft"] = True
    header = yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(f"---\n{header}---\n\n", encoding="utf-8")
    click.echo(f"Created {target.relative_to(project_root)}")


def _existing_slugs(content_dir: Path) -> dict[str, Path]:
    """Map every slug in the content directory (drafts included) to its file."""
    slugs: dict[str, Path] = {}
    for path in sorted(content_dir.rglob("*.md")):
        slugs.setdefault(slug_from_path(path.relative_to(content_dir)), path)
    return slugs


def _report_error(project_root: Path, exc) -> None:
    """Print a build error with the offending file relative to the project."""
    try:
        rel_path = exc.source_path.resolve().relative_to(project_root.resolve())
    except ValueError:
        rel_path = exc.source_path
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {rel_path}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()


def _scaffold(root: Path) -> None:
    """Create the files for a new blog project.

    Args:
        root: Root directory for the new project.
    """
    for src_path in _SCAFFOLD_DIR.rglob("*"):
        if src_path.is_dir():
            continue
        dest_path = root / src_path.relative_to(_SCAFFOLD_DIR)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_path, dest_path)
    (root / "static").mkdir(exist_ok=True)
    _write_placeholder_logo(root / _LOGO_PATH)
    _try_git_init(root)


def _write_placeholder_logo(path: Path) -> None:
    """Draw a simple logo so a fresh project builds before a real one is added."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGBA", (200, 200), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.ellipse((10, 10, 190, 190), fill=(46, 125, 50, 255))
    draw.ellipse((70, 70, 130, 130), fill=(255, 255, 255, 255))
    img.save(path, format="PNG")


def _try_git_init(root: Path) -> None:
    """Initialize a git repository if git is available."""
    if os.environ.get("BEANLOOP_SKIP_GIT_INIT") == "1":
        return
    git_bin = shutil.which("git")
    if not git_bin:
        return
    try:
        subprocess.run(
            [git_bin, "init"],
            cwd=root,
            check=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError):
        # Non-fatal: user can run git init manually
        pass
