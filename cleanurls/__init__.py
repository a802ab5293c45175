"""
cleanurls - Human-readable URLs for a course platform
"""

__version__ = "1.0.0"

from .core.engine import CleanUrls
from .core.config import CleanUrlsConfig, DictConfigSource, EnvConfigSource
from .core.errors import CleanUrlsError, EntityStoreError, PathCacheError

__all__ = [
    "CleanUrls",
    "CleanUrlsConfig",
    "DictConfigSource",
    "EnvConfigSource",
    "CleanUrlsError",
    "EntityStoreError",
    "PathCacheError",
]
