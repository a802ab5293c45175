"""Entity lookups and host filesystem checks."""

from .entity_resolver import EntityResolver
from .entity_store import MemoryEntityStore
from .static_routes import FilesystemStaticRoutes

__all__ = ["EntityResolver", "MemoryEntityStore", "FilesystemStaticRoutes"]
