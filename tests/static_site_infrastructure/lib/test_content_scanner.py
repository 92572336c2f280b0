import os

import pytest
from static_site_infrastructure.lib.content_scanner import (
    ContentFile,
    guess_content_type,
    scan_directory,
)

EXPECTED_KEYS = [
    "404.html",
    "assets/app.js",
    "assets/blob.unknownext",
    "assets/css/site.css",
    "cdn_errors/404.html",
    "cdn_errors/500.html",
    "cdn_errors/503.html",
    "index.html",
]


def test_scan_yields_every_file_depth_first(site_tree):
    keys = [content_file.relative_key for content_file in scan_directory(site_tree)]
    assert keys == EXPECTED_KEYS


def test_rescan_is_identical(site_tree):
    assert list(scan_directory(site_tree)) == list(scan_directory(site_tree))


def test_relative_key_strips_root(site_tree):
    files = {
        content_file.relative_key: content_file
        for content_file in scan_directory(site_tree)
    }
    css = files["assets/css/site.css"]
    assert css.absolute_path == site_tree / "assets" / "css" / "site.css"
    assert css.absolute_path.is_absolute()


def test_content_types_are_guessed(site_tree):
    files = {
        content_file.relative_key: content_file.content_type
        for content_file in scan_directory(site_tree)
    }
    assert files["index.html"] == "text/html"
    assert files["assets/css/site.css"] == "text/css"
    assert files["assets/blob.unknownext"] is None


def test_scan_is_lazy(tmp_path):
    scan = scan_directory(tmp_path / "does-not-exist")
    # Nothing is read until the generator is advanced
    with pytest.raises(OSError):  # noqa: PT011
        next(scan)


def test_missing_root_raises_ioerror(tmp_path):
    with pytest.raises(IOError):  # noqa: PT011
        list(scan_directory(tmp_path / "missing"))


def test_file_root_raises_oserror(site_tree):
    with pytest.raises(OSError):  # noqa: PT011
        list(scan_directory(site_tree / "index.html"))


def test_empty_directory_yields_nothing(tmp_path):
    assert list(scan_directory(tmp_path)) == []


def test_symlinked_directory_is_followed(site_tree, tmp_path):
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "logo.svg").write_text("<svg/>")
    os.symlink(shared, site_tree / "shared")
    files = {
        content_file.relative_key: content_file
        for content_file in scan_directory(site_tree)
    }
    assert files["shared/logo.svg"] == ContentFile(
        absolute_path=site_tree / "shared" / "logo.svg",
        relative_key="shared/logo.svg",
        content_type="image/svg+xml",
    )


def test_custom_content_type_resolver(site_tree):
    files = list(scan_directory(site_tree, content_type_resolver=lambda _: "x/test"))
    assert {content_file.content_type for content_file in files} == {"x/test"}


def test_guess_content_type_unknown_extension():
    assert guess_content_type("archive.notarealtype") is None
    assert guess_content_type("script.js") in {
        "text/javascript",
        "application/javascript",
    }
