"""
SheetBlog - Spreadsheet-Backed Blog Content
===========================================

Loads blog posts from a published spreadsheet CSV, with a bundled fallback
CSV and built-in sample posts when no source can be reached.

Main Components:
- Ingestion: timeout-bounded CSV fetching, row decoding and normalization
- Processing: publish filtering, subscriber notification, list views
- Storage: short-lived post snapshot cache in SQLite or memory
- Configuration: environment variables with Pydantic validation
"""

__version__ = "1.0.0"
__description__ = "Spreadsheet-backed blog content pipeline"

from .config.settings import get_settings
from .ingestion.models import Post
from .processing.pipeline import (
    PostPipeline,
    get_pipeline,
    get_post_by_slug,
    load_blog_posts,
    subscribe_to_post_updates,
)
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import SheetBlogError

__all__ = [
    "get_settings",
    "Post",
    "PostPipeline",
    "get_pipeline",
    "get_post_by_slug",
    "load_blog_posts",
    "subscribe_to_post_updates",
    "configure_application_logging",
    "get_logger_for_component",
    "SheetBlogError",
]
