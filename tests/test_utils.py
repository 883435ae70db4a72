from pathlib import Path

from beanloop.html_utils import absolutize_html_urls, escape_xml, join_root_url
from beanloop.utils import (
    ensure_clean_dir,
    first_paragraph,
    is_internal_path,
    is_markdown,
    slug_from_path,
    slugify,
    strip_date_prefix,
)


def test_slugify_drops_date_prefix_and_punctuation():
    assert slugify("2019-03-01-Hello World!") == "hello-world"
    assert slugify("React_Native  bridging") == "react-native-bridging"
    assert slugify("---") == ""


def test_strip_date_prefix_only_strips_full_dates():
    assert strip_date_prefix("2019-03-01-post") == "post"
    assert strip_date_prefix("2019-post") == "2019-post"


def test_slug_from_path_variants():
    assert slug_from_path(Path("hello-world/index.md")) == "hello-world"
    assert slug_from_path(Path("hello-world.md")) == "hello-world"
    assert slug_from_path(Path("2019-01-01-hello-world.md")) == "hello-world"
    assert slug_from_path(Path("guides/react/index.md")) == "guides/react"
    assert slug_from_path(Path("_unfinished.md")) == "unfinished"
    assert slug_from_path(Path("_notes/index.md")) == "notes"
    assert slug_from_path(Path("index.md")) == ""


def test_first_paragraph_skips_headings_and_flattens_markup():
    text = (
        "# Title\n\n![Logo](logo.png)\n\n"
        "Some *bold* and [linked](https://example.com) `code` text.\n\nMore"
    )
    assert first_paragraph(text) == "Some bold and linked code text."
    assert first_paragraph("```\ncode\n```") == ""
    assert len(first_paragraph("word " * 100, limit=20)) == 20


def test_path_predicates():
    assert is_markdown(Path("post.MD"))
    assert not is_markdown(Path("post.txt"))
    assert is_internal_path(Path("_drafts/post.md"))
    assert not is_internal_path(Path("posts/post.md"))


def test_ensure_clean_dir(tmp_path):
    target = tmp_path / "out"
    (target / "nested").mkdir(parents=True)
    (target / "nested" / "old.html").write_text("x", encoding="utf-8")
    ensure_clean_dir(target)
    assert target.is_dir()
    assert list(target.iterdir()) == []


def test_html_helpers():
    assert escape_xml('Tom & "Jerry" <3') == "Tom &amp; &quot;Jerry&quot; &lt;3"
    assert join_root_url("https://example.com/", "about/") == "https://example.com/about/"
    assert join_root_url("", "/about/") == "/about/"
    html = (
        '<a href="/post/">p</a><img src="photo.png">'
        '<a href="https://other.com/">o</a><a href="#top">t</a>'
    )
    result = absolutize_html_urls(html, "https://blog.example.com")
    assert 'href="https://blog.example.com/post/"' in result
    assert 'src="photo.png"' in result
    assert 'href="https://other.com/"' in result
    assert 'href="#top"' in result
    assert absolutize_html_urls(html, "") == html
