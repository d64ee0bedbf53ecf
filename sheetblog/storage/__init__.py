"""
SheetBlog Storage Module
========================

Key-value storage backends and the post snapshot cache.
"""

from .kv_store import KeyValueStore, MemoryKeyValueStore, SQLiteKeyValueStore
from .post_cache import PostCache

__all__ = ["KeyValueStore", "MemoryKeyValueStore", "SQLiteKeyValueStore", "PostCache"]
