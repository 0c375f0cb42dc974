"""Time-bounded key/value cache used to skip expensive steps."""

from .store import CacheLookup, CacheStore, FileCacheStore, InMemoryCacheStore, cache_file_name

__all__ = ["CacheLookup", "CacheStore", "FileCacheStore", "InMemoryCacheStore", "cache_file_name"]
