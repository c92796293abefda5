import datetime
import textwrap
from pathlib import Path

import pytest

from blogbuild.schemas.post import (
    BuildManifest,
    ManifestEntry,
    Post,
    PostFlags,
    Rejection,
)


def make_post(**overrides) -> Post:
    """Valid Post with sensible defaults; override any field."""
    fields = {
        "slug": "hello",
        "source_path": "hello.md",
        "title": "Hello",
        "publish_date": datetime.datetime(2023, 1, 1, tzinfo=datetime.timezone.utc),
        "raw_date": "2023-01-01",
        "categories": ("AWS",),
        "tags": ("aws",),
        "flags": PostFlags(),
        "body": "Hello\n",
    }
    fields.update(overrides)
    return Post(**fields)


def make_entry(slug: str = "hello", **overrides) -> ManifestEntry:
    fields = {
        "slug": slug,
        "source_path": f"{slug}.md",
        "title": slug.replace("-", " ").title(),
        "publishedAt": "2023-01-01T00:00:00+00:00",
        "categories": ["AWS"],
        "tags": ["aws"],
        "readingTime": "1 min",
        "output_path": f"{slug}/index.html",
        "fragment_path": f"{slug}/content.html",
    }
    fields.update(overrides)
    return ManifestEntry(**fields)


def post_source(
    title="Test",
    date="2023-01-01",
    categories="[A]",
    body="Hello\n",
    **extra,
) -> str:
    """Build raw file text with a YAML front-matter block."""
    lines = ["---"]
    if title is not None:
        lines.append(f"title: {title}")
    if date is not None:
        lines.append(f"date: {date}")
    if categories is not None:
        lines.append(f"categories: {categories}")
    for key, value in extra.items():
        lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n" + body


@pytest.fixture
def content_dir(tmp_path):
    """Content root plus a helper to drop dedented Markdown files into it."""
    root = tmp_path / "content"
    root.mkdir()

    def write(relative: str, text: str) -> Path:
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
        return target

    write.root = root
    return write


class FakeManifestRepo:
    """
    Minimal ManifestRepo stand-in holding pages in memory.
    """

    def __init__(self, manifest: BuildManifest | None = None, pages=None):
        self.manifest = manifest
        self.pages = dict(pages or {})
        self.saved = []

    def load(self):
        return self.manifest

    def save(self, manifest):
        self.saved.append(manifest)
        self.manifest = manifest

    def write_page(self, relative, html):
        self.pages[relative] = html

    def read_page(self, relative):
        return self.pages.get(relative)


class FakePostsService:
    """
    Minimal posts service stand-in for router tests.
    """

    def __init__(self, list_posts_return=None, get_post_return=None, rejected=None):
        self._list_posts_return = list_posts_return or []
        self._get_post_return = get_post_return
        self._rejected = rejected or []
        self.requested = []

    def list_posts(self):
        return self._list_posts_return

    def get_post(self, slug: str):
        self.requested.append(slug)
        return self._get_post_return

    def list_rejected(self):
        return self._rejected


class FakeBuilder:
    """
    SiteBuilder stand-in returning a canned manifest (or raising).
    """

    def __init__(self, manifest=None, error=None):
        self.manifest = manifest or BuildManifest()
        self.error = error
        self.calls = 0

    def build(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.manifest


def make_rejection(source_path="bad.md", error="MissingFieldError", reason="x"):
    return Rejection(source_path=source_path, error=error, reason=reason)
