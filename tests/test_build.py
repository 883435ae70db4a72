import logging
from pathlib import Path

import pytest
from PIL import Image

from beanloop.build import BuildError, build_site, load_posts
from beanloop.config import ConfigError, SiteMetadata, load_config

CONFIG = """\
site_metadata:
  title: Beanloop Blog
  author: Beanloop
  description: Modern web and apps
  site_url: https://blog.example.com
  bio: the passion for modern web technologies and app development.
  social:
    twitter: beanloop
"""


def create_project(tmp_path: Path) -> Path:
    project = tmp_path
    (project / "beanloop.yaml").write_text(CONFIG, encoding="utf-8")
    blog = project / "content" / "blog"
    (blog / "callbacks").mkdir(parents=True)
    (blog / "callbacks" / "index.md").write_text(
        "---\ntitle: Callbacks\ndate: 2019-02-01\ndescription: Functional callbacks\n---\n\n"
        "Intro text.\n\n![Diagram](diagram.png)\n",
        encoding="utf-8",
    )
    Image.new("RGB", (10, 10), color="red").save(blog / "callbacks" / "diagram.png")
    (blog / "2019-03-01-native-views.md").write_text(
        "---\ntitle: Native Views\ndate: 2019-03-01\n---\n\nBridging native views.\n",
        encoding="utf-8",
    )
    (blog / "_draft.md").write_text(
        "---\ntitle: Draft\ndate: 2019-04-01\n---\n\nNot yet.\n", encoding="utf-8"
    )
    assets = project / "content" / "assets"
    assets.mkdir(parents=True)
    Image.new("RGBA", (200, 200), color=(0, 128, 0, 255)).save(
        assets / "beanloop_symbol_positiv.png"
    )
    (project / "static").mkdir()
    (project / "static" / "robots.txt").write_text("User-agent: *\n", encoding="utf-8")
    return project


def test_build_site_writes_pages(tmp_path):
    project = create_project(tmp_path)
    result = build_site(project)
    out = project / "public"
    assert result.output_dir == out
    assert [p.slug for p in result.posts] == ["native-views", "callbacks"]
    assert result.feeds == ["sitemap.xml", "rss.xml"]

    index = (out / "index.html").read_text(encoding="utf-8")
    assert index.index("Native Views") < index.index("Callbacks")
    assert index.count('class="post-summary"') == 2
    assert "Draft" not in index
    assert '<a href="https://twitter.com/beanloop">' in index
    assert 'width="50" height="50"' in index
    assert 'alt="Beanloop logotype"' in index

    post = (out / "callbacks" / "index.html").read_text(encoding="utf-8")
    assert "<title>Callbacks | Beanloop Blog</title>" in post
    assert 'src="diagram.png"' in post
    assert 'rel="next"' in post
    assert (out / "callbacks" / "diagram.png").exists()
    assert (out / "native-views" / "index.html").exists()
    assert (out / "404.html").exists()
    assert (out / "robots.txt").exists()
    assert (out / "rss.xml").exists()
    assert (out / "sitemap.xml").exists()
    assert list((out / "static").rglob("beanloop_symbol_positiv-50x50.png"))
    assert (out / "index.html") in result.pages


def test_build_is_repeatable(tmp_path):
    project = create_project(tmp_path)
    build_site(project)
    first = (project / "public" / "callbacks" / "index.html").read_text(encoding="utf-8")
    build_site(project)
    second = (project / "public" / "callbacks" / "index.html").read_text(encoding="utf-8")
    assert first == second


def test_build_with_drafts_and_output_override(tmp_path):
    project = create_project(tmp_path)
    target = tmp_path / "elsewhere"
    result = build_site(project, include_drafts=True, output_dir_override=target)
    assert result.output_dir == target
    assert (target / "draft" / "index.html").exists()
    assert not (project / "public").exists()


def test_missing_title_fails_build(tmp_path):
    project = create_project(tmp_path)
    broken = project / "content" / "blog" / "broken.md"
    broken.write_text("---\ndate: 2019-05-01\n---\n\nNo title.\n", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == broken
    assert "title" in excinfo.value.message


def test_duplicate_slug_fails_build(tmp_path):
    project = create_project(tmp_path)
    copy = project / "content" / "blog" / "callbacks.md"
    copy.write_text(
        "---\ntitle: Callbacks (copy)\ndate: 2019-02-02\n---\n\nCopy.\n", encoding="utf-8"
    )
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert "callbacks" in excinfo.value.message


def test_missing_avatar_fails_build(tmp_path):
    project = create_project(tmp_path)
    (project / "content" / "assets" / "beanloop_symbol_positiv.png").unlink()
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert "avatar" in excinfo.value.message


def test_missing_twitter_handle_fails_build(tmp_path):
    project = create_project(tmp_path)
    config = CONFIG.replace("  social:\n    twitter: beanloop\n", "")
    (project / "beanloop.yaml").write_text(config, encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert "social.twitter" in excinfo.value.message
    assert excinfo.value.source_path == project / "beanloop.yaml"


def test_invalid_config_fails_build(tmp_path):
    project = create_project(tmp_path)
    (project / "beanloop.yaml").write_text("site_metadata:\n  title: Only title\n", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert "author" in excinfo.value.message
    assert isinstance(excinfo.value.original_error, ConfigError)


def test_broken_template_fails_build(tmp_path):
    project = create_project(tmp_path)
    (project / "templates").mkdir()
    (project / "templates" / "index.html.jinja").write_text("{% if %}", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert "Template syntax error" in excinfo.value.message


OUTPUT_DIR_CASES = [".", "content", "content/blog", "content/assets", "static", "templates"]


@pytest.mark.parametrize("output", OUTPUT_DIR_CASES)
def test_refuses_output_dir_holding_sources(tmp_path, output):
    project = create_project(tmp_path)
    with pytest.raises(BuildError) as excinfo:
        build_site(project, output_dir_override=project / output)
    assert "Refusing to use" in excinfo.value.message
    assert (project / "beanloop.yaml").exists()
    assert (project / "content" / "blog" / "callbacks" / "index.md").exists()
    assert (project / "content" / "assets" / "beanloop_symbol_positiv.png").exists()
    assert (project / "static" / "robots.txt").exists()


def test_refuses_configured_output_dir_holding_content(tmp_path):
    project = create_project(tmp_path)
    config = CONFIG + "output_dir: content\n"
    (project / "beanloop.yaml").write_text(config, encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert "content_dir" in excinfo.value.message
    assert (project / "content" / "blog" / "callbacks" / "index.md").exists()


def test_invalid_avatar_pattern_fails_build(tmp_path):
    project = create_project(tmp_path)
    config = CONFIG + "avatar_pattern: '[unclosed'\n"
    (project / "beanloop.yaml").write_text(config, encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert "Query 'avatar' failed" in excinfo.value.message
    assert "Invalid asset pattern" in excinfo.value.message
    assert excinfo.value.source_path == project / "beanloop.yaml"


@pytest.mark.parametrize(
    "setting", ["avatar_width: wide", "avatar_height: 0", "avatar_width: true", "debug: maybe"]
)
def test_invalid_build_setting_fails_build(tmp_path, setting):
    project = create_project(tmp_path)
    (project / "beanloop.yaml").write_text(CONFIG + setting + "\n", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert isinstance(excinfo.value.original_error, ConfigError)
    assert setting.split(":")[0] in excinfo.value.message
    assert excinfo.value.source_path == project / "beanloop.yaml"


def test_debug_logs_resolved_avatar(tmp_path, caplog):
    project = create_project(tmp_path)
    with caplog.at_level(logging.DEBUG, logger="beanloop"):
        build_site(project)
    assert "Bio avatar resolved" not in caplog.text
    caplog.clear()
    with caplog.at_level(logging.DEBUG, logger="beanloop"):
        build_site(project, debug=True)
    assert "Bio avatar resolved" in caplog.text


def test_load_posts(tmp_path):
    project = create_project(tmp_path)
    posts = load_posts(project)
    assert [p.title for p in posts] == ["Native Views", "Callbacks"]
    assert len(load_posts(project, include_drafts=True)) == 3


def test_load_config_defaults_and_errors(tmp_path):
    config = load_config(tmp_path)
    assert config["output_dir"] == "public"
    assert config["avatar_width"] == 50

    (tmp_path / "beanloop.yaml").write_text("- not\n- a mapping\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)
    (tmp_path / "beanloop.yaml").write_text("key: [broken\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_site_metadata_from_config():
    metadata = SiteMetadata.from_config(
        {"site_metadata": {"title": " Blog ", "author": "Beanloop", "social": {"twitter": "@bl"}}}
    )
    assert metadata.title == "Blog"
    assert metadata.social == {"twitter": "bl"}
    assert metadata.as_dict()["social"] == {"twitter": "bl"}
    with pytest.raises(ConfigError):
        SiteMetadata.from_config({"site_metadata": {"title": "Blog", "author": 3}})
    with pytest.raises(ConfigError):
        SiteMetadata.from_config({"site_metadata": {"title": "B", "author": "A", "social": "bl"}})
