"""
Local storage for downloaded template archives.
"""
from .cache import CacheEntry, cache_path_for, fetch_cached, read_cache_entry, write_stream_atomically

__all__ = ["CacheEntry", "cache_path_for", "fetch_cached", "read_cache_entry", "write_stream_atomically"]
