"""
Main URL cleaning orchestrator.
"""

from typing import Optional

from ..processors import Cleaner, Uncleaner
from ..resolvers import EntityResolver, FilesystemStaticRoutes, MemoryEntityStore
from ..routes.route_table import ROUTES
from ..storage import MemoryPathCache
from ..web.page_hook import pre_head_content
from .config import CleanUrlsConfig, DictConfigSource


class CleanUrls:
    """Wires the cleaner, the uncleaner and their collaborators together."""

    def __init__(
        self,
        wwwroot: str,
        store=None,
        cache=None,
        config_source=None,
        dirroot: Optional[str] = None,
        static_routes=None,
        site_course_id: int = 1,
        routes=ROUTES,
    ):
        """
        Initialize the engine.

        Args:
            wwwroot: Public site root, e.g. ``https://lms.example.com/moodle``
            store: Entity data store; an empty MemoryEntityStore by default
            cache: Path cache; a MemoryPathCache by default
            config_source: Settings source read on every call; a DictConfigSource by default
            dirroot: Host code directory, used to avoid shadowing real files
            static_routes: Replaces the dirroot based check when given
            site_course_id: Id of the site course, which has no path segment
            routes: Route table, first match wins
        """
        self.wwwroot = wwwroot.rstrip('/')
        self.store = store if store is not None else MemoryEntityStore()
        self.cache = cache if cache is not None else MemoryPathCache()
        self.config_source = config_source if config_source is not None else DictConfigSource()
        self.static_routes = static_routes if static_routes is not None else FilesystemStaticRoutes(dirroot)
        self.resolver = EntityResolver(self.store)

        collaborators = dict(
            wwwroot=self.wwwroot,
            resolver=self.resolver,
            cache=self.cache,
            config_source=self.config_source,
            static_routes=self.static_routes,
            site_course_id=site_course_id,
            routes=routes,
        )
        self.cleaner = Cleaner(**collaborators)
        self.uncleaner = Uncleaner(**collaborators)

    @property
    def config(self) -> CleanUrlsConfig:
        """Settings as they are right now."""
        return CleanUrlsConfig.from_source(self.config_source)

    def clean(self, url: str) -> str:
        return self.cleaner.clean(url)

    def unclean(self, url: str) -> str:
        return self.uncleaner.unclean(url)

    def head_content(self, page_url: str, override_url: Optional[str] = None, notes=None) -> str:
        """
        Head snippet for a page rendered at ``page_url``.

        Args:
            page_url: Native URL of the page being rendered
            override_url: Native URL a clean request was rewritten to, if any
            notes: Recorder for the clean URL note
        """
        return pre_head_content(self.clean(page_url), page_url, override_url, notes)
