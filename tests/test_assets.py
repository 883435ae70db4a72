from pathlib import Path

import pytest
from PIL import Image

from beanloop.assets import (
    AssetError,
    AssetNotFoundError,
    AssetPipeline,
    AssetReference,
    AssetStore,
    ImageProcessor,
)


def make_image(path: Path, size=(200, 200), color="green") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color=color).save(path)
    return path


def test_store_finds_by_pattern(tmp_path):
    assets = tmp_path / "content" / "assets"
    make_image(assets / "beanloop_symbol_positiv.png")
    make_image(assets / "other.png")
    store = AssetStore(assets)

    ref = store.find(r"beanloop_symbol_positiv\.png$")
    assert ref.name == "beanloop_symbol_positiv.png"
    assert ref.relative_path == Path("beanloop_symbol_positiv.png")
    # GraphQL-style slashes are accepted
    assert store.find("/beanloop_symbol_positiv.png/") == ref


def test_store_first_sorted_match_wins(tmp_path):
    assets = tmp_path / "assets"
    make_image(assets / "b" / "logo.png")
    make_image(assets / "a" / "logo.png")
    ref = AssetStore(assets).find(r"logo\.png")
    assert ref.relative_path == Path("a") / "logo.png"


def test_store_missing_asset(tmp_path):
    store = AssetStore(tmp_path / "assets")
    with pytest.raises(AssetNotFoundError) as excinfo:
        store.find("missing.png")
    assert excinfo.value.pattern == "missing.png"
    assert "missing.png" in str(excinfo.value)


def test_store_rejects_invalid_pattern(tmp_path):
    make_image(tmp_path / "assets" / "logo.png")
    with pytest.raises(AssetError) as excinfo:
        AssetStore(tmp_path / "assets").find("[unclosed")
    assert not isinstance(excinfo.value, AssetNotFoundError)
    assert "Invalid asset pattern" in excinfo.value.message


def test_fixed_variant_has_exact_dimensions(tmp_path):
    source = make_image(tmp_path / "assets" / "logo.png", size=(200, 120))
    ref = AssetReference(source, Path("logo.png"))
    out = tmp_path / "public"

    fixed = ImageProcessor(out).fixed(ref, 50, 50)
    assert (fixed.width, fixed.height) == (50, 50)
    assert fixed.src.startswith("/static/")
    assert fixed.src.endswith("/logo-50x50.png")
    assert len(fixed.files) == 3
    assert fixed.srcset.endswith(" 2x")
    assert " 1.5x" in fixed.srcset

    with Image.open(out / fixed.src.lstrip("/")) as img:
        assert img.size == (50, 50)
    sizes = []
    for path in fixed.files:
        with Image.open(path) as img:
            sizes.append(img.size)
    assert sizes == [(50, 50), (75, 75), (100, 100)]


def test_fixed_variant_skips_upscaled_densities(tmp_path):
    source = make_image(tmp_path / "logo.png", size=(60, 60))
    fixed = ImageProcessor(tmp_path / "out").fixed(AssetReference(source, Path("logo.png")), 50, 50)
    assert len(fixed.files) == 1
    assert fixed.srcset == f"{fixed.src} 1x"


def test_fixed_variant_is_deterministic(tmp_path):
    source = make_image(tmp_path / "logo.png")
    ref = AssetReference(source, Path("logo.png"))
    first = ImageProcessor(tmp_path / "one").fixed(ref, 50, 50)
    second = ImageProcessor(tmp_path / "two").fixed(ref, 50, 50)
    assert first.src == second.src
    assert first.srcset == second.srcset


def test_fixed_variant_rejects_bad_input(tmp_path):
    bogus = tmp_path / "logo.png"
    bogus.write_text("not an image", encoding="utf-8")
    processor = ImageProcessor(tmp_path / "out")
    with pytest.raises(AssetError):
        processor.fixed(AssetReference(bogus, Path("logo.png")), 50, 50)

    real = make_image(tmp_path / "real.png")
    with pytest.raises(AssetError):
        processor.fixed(AssetReference(real, Path("real.png")), 0, 50)


class BundlePost:
    def __init__(self, path: Path, slug: str, is_bundle: bool):
        self.path = path
        self.slug = slug
        self.is_bundle = is_bundle


def test_pipeline_copies_static_and_bundle_files(tmp_path):
    static = tmp_path / "static"
    (static / "img").mkdir(parents=True)
    (static / "favicon.ico").write_bytes(b"ico")
    (static / "img" / "a.txt").write_text("a", encoding="utf-8")

    bundle = tmp_path / "content" / "blog" / "hello"
    bundle.mkdir(parents=True)
    (bundle / "index.md").write_text("---\n---\n", encoding="utf-8")
    (bundle / "diagram.svg").write_text("<svg/>", encoding="utf-8")
    flat = tmp_path / "content" / "blog" / "flat.md"
    flat.write_text("---\n---\n", encoding="utf-8")

    out = tmp_path / "public"
    written = AssetPipeline(static, out).run(
        [
            BundlePost(bundle / "index.md", "hello", True),
            BundlePost(flat, "flat", False),
        ]
    )
    assert (out / "favicon.ico").read_bytes() == b"ico"
    assert (out / "img" / "a.txt").exists()
    assert (out / "hello" / "diagram.svg").exists()
    assert not (out / "hello" / "index.md").exists()
    assert len(written) == 3


def test_pipeline_without_static_dir(tmp_path):
    assert AssetPipeline(tmp_path / "nope", tmp_path / "out").run([]) == []
