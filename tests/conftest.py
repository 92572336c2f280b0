"""Shared pytest fixtures for Pulumi infrastructure tests.

This module provides common fixtures and utilities for testing the static site
components and helpers.
"""

import os
from pathlib import Path

import pytest

# boto3 clients are only ever created lazily, but give them a region so that creating
# one in a test never depends on the developer's environment.
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def mock_tags():
    """Return standard tags for test resources.

    Returns:
        dict: Dictionary of common resource tags.
    """
    return {
        "Environment": "test",
        "Owner": "platform-engineering",
        "Application": "docs-site",
    }


@pytest.fixture
def site_tree(tmp_path: Path) -> Path:
    """Build a small static site on disk.

    Returns:
        Path: Root of the content tree.
    """
    root = tmp_path / "data"
    (root / "assets" / "css").mkdir(parents=True)
    (root / "cdn_errors").mkdir()
    (root / "index.html").write_text("<h1>home</h1>")
    (root / "404.html").write_text("<h1>missing</h1>")
    (root / "assets" / "css" / "site.css").write_text("body {}")
    (root / "assets" / "app.js").write_text("console.log('hi');")
    (root / "assets" / "blob.unknownext").write_bytes(b"\x00\x01")
    for status_code in (404, 500, 503):
        (root / "cdn_errors" / f"{status_code}.html").write_text(str(status_code))
    return root
