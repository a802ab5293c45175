"""
Clean URL to original URL transformation.
"""

import logging
from typing import Optional
from urllib.parse import unquote

from ..core.config import CleanUrlsConfig
from ..core.types import CleanUrl, OriginalUrl, merge_params
from ..routes.route_table import ROUTES, RouteContext, find_clean_route, is_script_path
from ..storage import INCOMING
from .cleaner import is_excluded

logger = logging.getLogger(__name__)


class Uncleaner:
    """
    Resolves clean URLs back to the platform's native URLs.

    Uncleaning does not depend on the ``cleaningon`` switch: clean links that
    were already handed out keep working after cleaning is turned off.
    """

    def __init__(self, wwwroot: str, resolver, cache, config_source, static_routes,
                 site_course_id: int = 1, routes=ROUTES):
        self.wwwroot = wwwroot.rstrip('/')
        self.resolver = resolver
        self.cache = cache
        self.config_source = config_source
        self.static_routes = static_routes
        self.site_course_id = site_course_id
        self.routes = routes

    def unclean(self, url: str) -> str:
        """
        Unclean a URL.

        Args:
            url: Absolute URL as requested

        Returns:
            The native URL, or ``url`` itself when it is not a known clean shape
        """
        clean = CleanUrl.parse(url, self.wwwroot)
        if clean is None:
            return url

        cached = self.cache.get(INCOMING, url)
        if cached is not None:
            logger.debug("Incoming cache hit for %s", url)
            return cached

        if self.is_static(clean):
            return url

        original = self.parse(clean, CleanUrlsConfig.from_source(self.config_source))
        if original is None:
            return url

        result = original.out(self.wwwroot)
        self.cache.set(INCOMING, url, result)
        return result

    def is_static(self, clean: CleanUrl) -> bool:
        """True for paths the web server serves directly."""
        if not clean.segments:
            return True
        path = clean.path
        if is_excluded(path) or is_script_path(path):
            return True
        return self.static_routes.exists(unquote(path))

    def parse(self, clean: CleanUrl, config: CleanUrlsConfig) -> Optional[OriginalUrl]:
        """Run the route table over a parsed clean URL without touching the cache."""
        found = find_clean_route(self.routes, clean)
        if found is None:
            return None

        ctx = RouteContext(
            resolver=self.resolver,
            config=config,
            static_routes=self.static_routes,
            site_course_id=self.site_course_id,
        )
        route, match = found
        parsed = route.parse(ctx, match, clean)
        if parsed is None:
            logger.debug("Route %s matched %s but could not be resolved", route.name, clean.path)
            return None

        logger.debug("Route %s uncleaned %s", route.name, clean.path)
        # Parameters recovered from the path win over same-named query parameters.
        recovered = dict(parsed.params)
        extra = tuple((k, v) for k, v in clean.params if k not in recovered)
        return OriginalUrl(
            path=parsed.path,
            params=merge_params(parsed.params + extra),
            fragment=clean.fragment,
        )
