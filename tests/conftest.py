"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for SheetBlog tests.

Pipelines built here are isolated: each gets its own fake fetcher,
in-memory cache and update bus.
"""

import csv
import io
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["SHEETBLOG_CACHE__BACKEND"] = "memory"
os.environ["SHEETBLOG_LOGGING__FILE_PATH"] = ""
os.environ["SHEETBLOG_DEBUG"] = "true"

PRIMARY_URL = "https://docs.example.com/spreadsheets/d/test-sheet/pub?output=csv"
FALLBACK_URL = "https://static.example.com/data/fallbackPosts.csv"

CSV_COLUMNS = [
    "id", "title", "slug", "excerpt", "content", "author", "date",
    "readTime", "categories", "featuredImage", "featured", "load",
]


def build_csv(rows: List[Dict[str, str]], columns: Optional[List[str]] = None) -> str:
    """Render rows as header-row CSV text."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns or CSV_COLUMNS, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def make_row(index: int, load: str = "TRUE", **overrides) -> Dict[str, str]:
    """A complete spreadsheet row."""
    row = {
        "id": str(index),
        "title": f"Post {index}",
        "slug": f"post-{index}",
        "excerpt": f"Excerpt {index}",
        "content": f"# Post {index}\n\nBody of post {index}.",
        "author": "Jane Developer",
        "date": f"2024-01-{index:02d}",
        "readTime": f"{index} min read",
        "categories": "Python, Testing",
        "featuredImage": f"/images/post-{index}.jpg",
        "featured": "FALSE",
        "load": load,
    }
    row.update(overrides)
    return row


class FakeFetcher:
    """Stands in for SourceFetcher; maps URLs to CSV text or exceptions."""

    def __init__(self, responses: Dict[str, Union[str, Exception]]):
        self.responses = responses
        self.calls: List[str] = []

    async def fetch_source(self, url: str) -> str:
        self.calls.append(url)
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


# ============================================================================
# Settings and Pipeline Fixtures
# ============================================================================


@pytest.fixture
def make_settings():
    """Factory for settings with explicit sources and no disk cache."""
    from sheetblog.config.settings import (
        CacheBackend,
        CacheSettings,
        LastResortPolicy,
        PipelineSettings,
        SheetBlogSettings,
        SourceSettings,
    )

    def _make(
        primary_url: Optional[str] = PRIMARY_URL,
        fallback_url: str = FALLBACK_URL,
        last_resort: LastResortPolicy = LastResortPolicy.SAMPLE,
        cache_enabled: bool = False,
    ) -> SheetBlogSettings:
        return SheetBlogSettings(
            sources=SourceSettings(primary_url=primary_url, fallback_url=fallback_url),
            cache=CacheSettings(enabled=cache_enabled, backend=CacheBackend.MEMORY),
            pipeline=PipelineSettings(last_resort=last_resort),
        )

    return _make


@pytest.fixture
def make_pipeline(make_settings):
    """Factory for an isolated pipeline around a FakeFetcher."""
    from sheetblog.processing.pipeline import PostPipeline

    def _make(responses: Dict[str, Union[str, Exception]], cache=None, **settings_kwargs):
        fetcher = FakeFetcher(responses)
        pipeline = PostPipeline(
            settings=make_settings(**settings_kwargs),
            fetcher=fetcher,
            cache=cache,
        )
        return pipeline, fetcher

    return _make


@pytest.fixture
def memory_cache():
    """Post cache over an in-memory store with a controllable clock."""
    from sheetblog.storage.kv_store import MemoryKeyValueStore
    from sheetblog.storage.post_cache import PostCache

    class Clock:
        def __init__(self):
            self.now = 1_700_000_000.0

        def __call__(self) -> float:
            return self.now

        def advance(self, seconds: float) -> None:
            self.now += seconds

    clock = Clock()
    cache = PostCache(MemoryKeyValueStore(), clock=clock)
    cache.test_clock = clock
    return cache


@pytest.fixture
def five_row_csv():
    """Five rows of which two are switched on for publishing."""
    return build_csv([
        make_row(1, load="TRUE"),
        make_row(2, load="FALSE"),
        make_row(3, load="true"),
        make_row(4, load=""),
        make_row(5, load="yes"),
    ])


@pytest.fixture
def sample_posts():
    """A small, varied set of published posts."""
    from sheetblog.ingestion.models import Post

    return [
        Post(id="1", title="Async Python in Practice", slug="async-python",
             excerpt="Event loops, tasks and timeouts.", author="Jane Developer",
             date="2024-02-10", categories=["Python", "Async"], featured=True, load=True),
        Post(id="2", title="Styling with CSS Grid", slug="css-grid",
             excerpt="Two-dimensional layouts.", author="Alex Designer",
             date="2024-03-05", categories=["CSS", "Frontend"], load=True),
        Post(id="3", title="Testing Python Services", slug="testing-python",
             excerpt="Fixtures, fakes and local servers.", author="Sam Tech",
             date="2023-12-24", categories=["python", "Testing"], featured=True, load=True),
        Post(id="4", title="Undated Notes", slug="undated-notes",
             excerpt="No usable date.", author="Morgan UX",
             date="someday", categories=[], load=True),
    ]
