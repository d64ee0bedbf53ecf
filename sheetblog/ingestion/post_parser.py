"""
Post Parser
===========

Turns spreadsheet CSV into Post records.

Every row yields exactly one post: rows that cannot be decoded become the
sentinel error post (``load=False``) so one bad row never aborts a batch.
"""

import csv
import io
from typing import Any, Dict, Iterable, List, Mapping

from pydantic import ValidationError as PydanticValidationError

from .models import (
    DEFAULT_FEATURED_IMAGE,
    DEFAULT_READ_TIME,
    Post,
    PostRow,
    RowDecodeResult,
    make_error_post,
    today_iso,
)
from ..utils.exceptions import RowDecodeError, SourceParseError
from ..utils.logging import get_logger_for_component

logger = get_logger_for_component("post_parser")


def coerce_bool(value: Any) -> bool:
    """Allow-list boolean coercion shared by ``load`` and ``featured``.

    Only the strings ``"TRUE"``/``"true"`` and the native ``True`` count as
    true; everything else (``"yes"``, ``1``, ``"True"``, None) is false.
    """
    # 1 == True, so compare identity for non-strings
    if isinstance(value, str):
        return value in ("TRUE", "true")
    return value is True


def split_categories(raw: str) -> List[str]:
    """Split a comma-separated category cell, trimming entries and dropping blanks."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def decode_row(raw_row: Any) -> RowDecodeResult:
    """Decode one raw row into a post.

    Never raises; failures are reported through the result's ``error``.
    """
    if not isinstance(raw_row, Mapping):
        return RowDecodeResult(
            error=RowDecodeError(f"Row is not a mapping: {type(raw_row).__name__}", row=raw_row)
        )

    try:
        row = PostRow.model_validate(
            {key: value for key, value in raw_row.items() if isinstance(key, str)}
        )
        post = Post(
            id=row.id or "0",
            title=row.title or "Untitled Post",
            slug=row.slug or "untitled-post",
            excerpt=row.excerpt or "",
            content=row.content or "",
            author=row.author or "Anonymous",
            date=row.date or today_iso(),
            read_time=row.readTime or DEFAULT_READ_TIME,
            categories=split_categories(row.categories) if row.categories else [],
            featured_image=row.featuredImage or DEFAULT_FEATURED_IMAGE,
            featured=coerce_bool(row.featured),
            load=coerce_bool(row.load),
        )
    except PydanticValidationError as e:
        return RowDecodeResult(
            error=RowDecodeError(f"Row failed schema validation: {e.error_count()} error(s)", row=raw_row)
        )
    except Exception as e:
        return RowDecodeResult(error=RowDecodeError(f"Row conversion failed: {e}", row=raw_row))

    return RowDecodeResult(post=post)


def parse_row(raw_row: Any) -> Post:
    """Convert a raw row into a Post, substituting the sentinel on failure."""
    result = decode_row(raw_row)
    if result.success:
        return result.post

    logger.warning(f"Error parsing blog post row: {result.error}", extra=result.error.to_dict())
    return make_error_post()


def parse_batch(rows: Iterable[Any]) -> List[Post]:
    """Map every row through parse_row; output length equals input length."""
    return [parse_row(row) for row in rows]


def filter_loadable(posts: Iterable[Post]) -> List[Post]:
    """Keep only posts whose ``load`` switch is on."""
    return [post for post in posts if post.load]


def read_csv_rows(text: str) -> List[Dict[str, Any]]:
    """Read header-row CSV text into row dicts.

    Blank lines are skipped. Short rows leave their trailing columns as
    None; surplus cells are dropped.

    Raises:
        SourceParseError: If the text is not readable CSV
    """
    try:
        reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")), restval=None)
        rows = []
        short_rows = 0
        for record in reader:
            if None in record:
                record.pop(None)
            if any(value is None for value in record.values()):
                short_rows += 1
            rows.append(record)
    except csv.Error as e:
        raise SourceParseError(f"CSV parsing failed: {e}") from e

    if short_rows:
        logger.debug(f"{short_rows} CSV row(s) had fewer fields than the header")

    return rows
