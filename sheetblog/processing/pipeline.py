"""
Content Ingestion Pipeline
==========================

fetch → parse → filter → notify → cache.

The primary source is tried first, then the fallback source exactly once.
When both fail the configured last-resort result is returned. None of the
public entry points raise on source, parse or cache failures.
"""

from typing import Callable, List, Optional

from ..config.settings import (
    CacheBackend,
    LastResortPolicy,
    SheetBlogSettings,
    get_settings,
)
from ..ingestion.models import Post
from ..ingestion.post_parser import filter_loadable, parse_batch, read_csv_rows
from ..ingestion.sample_posts import loadable_sample_posts
from ..ingestion.source_fetcher import SourceFetcher
from ..storage.kv_store import MemoryKeyValueStore, SQLiteKeyValueStore
from ..storage.post_cache import PostCache
from ..utils.exceptions import CacheError, SourceEmptyError, SourceError
from ..utils.logging import PerformanceLogger, get_logger_for_component
from .publisher import PostCallback, PostUpdateBus


def build_cache(settings: SheetBlogSettings) -> Optional[PostCache]:
    """Create the post cache described by settings, or None when disabled."""
    if not settings.cache.enabled:
        return None

    if settings.cache.backend == CacheBackend.MEMORY:
        store = MemoryKeyValueStore()
    else:
        try:
            store = SQLiteKeyValueStore(settings.cache.path)
        except (CacheError, OSError) as e:
            get_logger_for_component("pipeline").warning(
                f"SQLite cache unavailable, using in-memory cache: {e}"
            )
            store = MemoryKeyValueStore()

    return PostCache(store, key=settings.cache.key, ttl_seconds=settings.cache.ttl_seconds)


class PostPipeline:
    """Blog post ingestion pipeline with its own fetcher, cache and update bus."""

    def __init__(
        self,
        settings: Optional[SheetBlogSettings] = None,
        fetcher: Optional[SourceFetcher] = None,
        cache: Optional[PostCache] = None,
        bus: Optional[PostUpdateBus] = None,
    ):
        """Initialize pipeline.

        Args:
            settings: Configuration (default: global settings)
            fetcher: Source fetcher (default: built from settings)
            cache: Post cache (default: built from settings; may be None)
            bus: Update bus (default: a fresh private bus)
        """
        self.settings = settings or get_settings()
        self.fetcher = fetcher or SourceFetcher(
            timeout_ms=self.settings.sources.request_timeout_ms,
            user_agent=f"{self.settings.app_name}/{self.settings.version}",
        )
        self.cache = cache if cache is not None else build_cache(self.settings)
        self.bus = bus or PostUpdateBus()
        self.logger = get_logger_for_component("pipeline")

    def subscribe_to_post_updates(self, callback: PostCallback) -> Callable[[], None]:
        """Register for every newly published post set; returns unsubscribe."""
        return self.bus.subscribe(callback)

    async def load_blog_posts(self, use_cache: bool = False) -> List[Post]:
        """Load the published (``load=True``) posts.

        Args:
            use_cache: Serve a fresh cached snapshot instead of fetching

        Returns:
            Published posts, or the last-resort result if every source failed
        """
        if use_cache and self.cache is not None:
            cached = self.cache.get()
            if cached is not None:
                self.logger.debug(f"Serving {len(cached)} posts from cache")
                return cached

        for source_url in self._source_urls():
            try:
                posts = await self._fetch_and_process(source_url)
            except SourceError as e:
                self.logger.warning(f"Post source failed: {e}", extra=e.to_dict())
                continue
            except Exception as e:
                self.logger.error(
                    f"Unexpected error loading posts from {source_url}: {e}", exc_info=True
                )
                continue

            # Outside the try: a failing subscriber must not trigger the fallback
            self.bus.publish(posts)
            if self.cache is not None:
                self.cache.set(posts)
            return posts

        return self._last_resort()

    async def get_post_by_slug(self, slug: str, use_cache: bool = False) -> Optional[Post]:
        """Find a published post by exact, case-sensitive slug."""
        posts = await self.load_blog_posts(use_cache=use_cache)
        for post in posts:
            if post.slug == slug:
                return post
        return None

    def _source_urls(self) -> List[str]:
        urls = []
        if self.settings.sources.primary_url:
            urls.append(self.settings.sources.primary_url)
        else:
            self.logger.info("No primary post source configured, using fallback source")
        urls.append(self.settings.sources.fallback_url)
        return urls

    async def _fetch_and_process(self, source_url: str) -> List[Post]:
        with PerformanceLogger(self.logger, "fetch", source_url=source_url):
            text = await self.fetcher.fetch_source(source_url)

        with PerformanceLogger(self.logger, "parse", source_url=source_url):
            rows = read_csv_rows(text)
            if not rows:
                raise SourceEmptyError("No valid data in CSV", source_url=source_url)

            all_posts = parse_batch(rows)
            posts = filter_loadable(all_posts)

        self.logger.info(
            f"Parsed {len(all_posts)} rows from {source_url}, {len(posts)} published"
        )
        return posts

    def _last_resort(self) -> List[Post]:
        if self.settings.pipeline.last_resort == LastResortPolicy.SAMPLE:
            self.logger.error("All post sources failed, returning sample posts")
            return loadable_sample_posts()

        self.logger.error("All post sources failed, returning no posts")
        return []


# Default pipeline used by the module-level functions
_pipeline: Optional[PostPipeline] = None


def get_pipeline(reload: bool = False) -> PostPipeline:
    """Get the process-wide default pipeline (created on first use)."""
    global _pipeline

    if _pipeline is None or reload:
        _pipeline = PostPipeline()

    return _pipeline


async def load_blog_posts(use_cache: bool = False) -> List[Post]:
    return await get_pipeline().load_blog_posts(use_cache=use_cache)


async def get_post_by_slug(slug: str, use_cache: bool = False) -> Optional[Post]:
    return await get_pipeline().get_post_by_slug(slug, use_cache=use_cache)


def subscribe_to_post_updates(callback: PostCallback) -> Callable[[], None]:
    return get_pipeline().subscribe_to_post_updates(callback)
