"""
Post list views used by the blog index and home pages: ordering,
featured selection, category filtering and approximate search.
"""

from collections import Counter
from datetime import datetime
from difflib import SequenceMatcher
from typing import Dict, Iterable, List, Optional

from ..ingestion.models import Post

ALL_CATEGORIES = "all"
SEARCH_FIELDS = ("title", "excerpt", "categories", "author")


def _parse_date(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
    # Compare naive and aware dates on the same footing
    return parsed.replace(tzinfo=None)


def sort_by_date(posts: Iterable[Post]) -> List[Post]:
    """Newest first; posts with unparseable dates go last in input order."""
    dated = []
    undated = []
    for post in posts:
        parsed = _parse_date(post.date)
        if parsed is None:
            undated.append(post)
        else:
            dated.append((parsed, post))

    dated.sort(key=lambda item: item[0], reverse=True)
    return [post for _, post in dated] + undated


def featured_posts(posts: Iterable[Post], limit: Optional[int] = None) -> List[Post]:
    featured = [post for post in posts if post.featured]
    return featured[:limit] if limit is not None else featured


def filter_by_categories(posts: Iterable[Post], selected: Iterable[str]) -> List[Post]:
    """Keep posts carrying every selected category (case-insensitive).

    An empty selection, or one containing ``"all"``, keeps everything.
    """
    wanted = [category.strip().lower() for category in selected if category.strip()]
    posts = list(posts)
    if not wanted or ALL_CATEGORIES in wanted:
        return posts

    return [
        post for post in posts
        if all(category in post.category_keys for category in wanted)
    ]


def category_counts(posts: Iterable[Post]) -> Dict[str, int]:
    """Lower-cased category -> number of posts, most common first."""
    counts = Counter()
    for post in posts:
        counts.update(post.category_keys)
    return dict(counts.most_common())


def _field_text(post: Post, field: str) -> List[str]:
    value = getattr(post, field)
    if isinstance(value, list):
        return [item.lower() for item in value]
    return [value.lower()]


def _match_score(term: str, text: str) -> float:
    """0.0 is a perfect match, 1.0 no match at all."""
    if not text:
        return 1.0
    if term in text:
        return 0.0

    best = SequenceMatcher(None, term, text).ratio()
    for word in text.split():
        best = max(best, SequenceMatcher(None, term, word).ratio())
    return 1.0 - best


def search_posts(posts: Iterable[Post], term: str, threshold: float = 0.4) -> List[Post]:
    """Approximate search over title, excerpt, categories and author.

    Results are ordered best match first. A blank term returns the posts
    unchanged.
    """
    posts = list(posts)
    term = (term or "").strip().lower()
    if not term:
        return posts

    scored = []
    for index, post in enumerate(posts):
        texts = [text for field in SEARCH_FIELDS for text in _field_text(post, field)]
        score = min((_match_score(term, text) for text in texts), default=1.0)
        if score <= threshold:
            scored.append((score, index, post))

    scored.sort(key=lambda item: (item[0], item[1]))
    return [post for _, _, post in scored]
