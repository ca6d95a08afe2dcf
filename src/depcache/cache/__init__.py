"""
depcache Cache Module

- CacheStore: Persistent store of dependency directories, addressed by
  relative path, supporting existence checks, restore (link or copy),
  save (mirror) and delete
"""

from .store import CacheStore

__all__ = [
    'CacheStore',
]
