"""Storage module for cached URL mappings."""

from .path_cache import FilePathCache, MemoryPathCache, INCOMING, OUTGOING, NAMESPACES

__all__ = ['FilePathCache', 'MemoryPathCache', 'INCOMING', 'OUTGOING', 'NAMESPACES']
