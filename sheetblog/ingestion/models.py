"""
SheetBlog Data Models
=====================

Pydantic models for blog posts and the spreadsheet rows they come from.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..utils.exceptions import RowDecodeError

DEFAULT_READ_TIME = "5 min read"
DEFAULT_FEATURED_IMAGE = "/images/default-post.jpg"


def today_iso() -> str:
    """Today's date as YYYY-MM-DD."""
    return date.today().isoformat()


class Post(BaseModel):
    """A single blog entry derived from one spreadsheet row."""
    id: str = Field(default="0", description="Opaque identifier, not deduplicated")
    title: str = Field(default="Untitled Post")
    slug: str = Field(default="untitled-post")
    excerpt: str = Field(default="")
    content: str = Field(default="")
    author: str = Field(default="Anonymous")
    date: str = Field(default_factory=today_iso, description="ISO-ish publication date")
    read_time: str = Field(default=DEFAULT_READ_TIME, alias="readTime")
    categories: List[str] = Field(default_factory=list, description="Display-cased categories")
    featured_image: str = Field(default=DEFAULT_FEATURED_IMAGE, alias="featuredImage")
    featured: bool = Field(default=False, description="Highlight on the homepage")
    load: bool = Field(default=False, description="Publish switch; false means draft")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @property
    def category_keys(self) -> List[str]:
        """Lower-cased categories for comparison."""
        return [category.lower() for category in self.categories]

    def to_record(self) -> dict:
        """Serialize with the spreadsheet's camelCase column names."""
        return self.model_dump(by_alias=True)

    def __str__(self) -> str:
        return f"Post({self.slug}:{self.title[:50]})"


def make_error_post() -> Post:
    """Sentinel placeholder for a row that failed normalization."""
    return Post(
        id="0",
        title="Error Post",
        slug="error-post",
        excerpt="There was an error loading this post",
        content="There was an error loading this post content",
        author="System",
        date=today_iso(),
        read_time="0 min read",
        categories=["error"],
        featured_image="/images/error-post.jpg",
        featured=False,
        load=False,
    )


class PostRow(BaseModel):
    """Schema of one CSV row.

    Text columns are optional strings. Numeric cells (a native ``7`` id from
    a typed source) are read as their text; lists, mappings and booleans
    still fail validation. ``featured`` and ``load`` take any value and are
    coerced later through the boolean allow-list.
    """
    id: Optional[str] = None
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    date: Optional[str] = None
    readTime: Optional[str] = None
    categories: Optional[str] = None
    featuredImage: Optional[str] = None
    featured: Any = None
    load: Any = None

    model_config = {
        "extra": "ignore",
        "strict": True,
    }

    @field_validator(
        "id", "title", "slug", "excerpt", "content", "author",
        "date", "readTime", "categories", "featuredImage",
        mode="before",
    )
    @classmethod
    def numbers_as_text(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


@dataclass
class RowDecodeResult:
    """Outcome of decoding one row: either a post or an error."""

    post: Optional[Post] = None
    error: Optional[RowDecodeError] = None

    @property
    def success(self) -> bool:
        return self.post is not None
