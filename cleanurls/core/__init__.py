"""Core components for URL cleaning."""

from .engine import CleanUrls
from .config import CleanUrlsConfig, DictConfigSource, EnvConfigSource
from .types import CleanUrl, OriginalUrl

__all__ = ["CleanUrls", "CleanUrlsConfig", "DictConfigSource", "EnvConfigSource", "CleanUrl", "OriginalUrl"]
