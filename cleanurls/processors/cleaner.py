"""
Original URL to clean URL transformation.
"""

import logging
import re
from typing import Optional

from ..core.config import CleanUrlsConfig
from ..core.types import CleanUrl, OriginalUrl
from ..routes.route_table import ROUTES, RouteContext, find_original_route
from ..storage import OUTGOING

logger = logging.getLogger(__name__)

# File serving endpoints, static asset roots and help popups.
EXCLUDED_PATHS = re.compile(r'^/(?:draftfile\.php|pluginfile\.php|help\.php)(?:/|$)|^/(?:lib|theme)/')


def is_excluded(path: str) -> bool:
    return bool(EXCLUDED_PATHS.match(path))


def outgoing_key(url: str, config: CleanUrlsConfig) -> str:
    """Outgoing cache key; the same URL cleans differently with usernames on or off."""
    return f'u{int(config.clean_usernames)}|{url}'


class Cleaner:
    """Turns platform URLs into clean URLs, memoizing results in the outgoing cache."""

    def __init__(self, wwwroot: str, resolver, cache, config_source, static_routes,
                 site_course_id: int = 1, routes=ROUTES):
        self.wwwroot = wwwroot.rstrip('/')
        self.resolver = resolver
        self.cache = cache
        self.config_source = config_source
        self.static_routes = static_routes
        self.site_course_id = site_course_id
        self.routes = routes

    def clean(self, url: str) -> str:
        """
        Clean a URL.

        Args:
            url: Absolute URL in the platform's native form

        Returns:
            The clean URL, or ``url`` itself when it cannot or must not be cleaned
        """
        config = CleanUrlsConfig.from_source(self.config_source)
        if not config.cleaning_on:
            return url

        original = OriginalUrl.parse(url, self.wwwroot)
        if original is None or is_excluded(original.path):
            return url

        key = outgoing_key(url, config)
        cached = self.cache.get(OUTGOING, key)
        if cached is not None:
            logger.debug("Outgoing cache hit for %s", url)
            return cached

        clean = self.build(original, config)
        if clean is None:
            return url

        cleaned = clean.out(self.wwwroot)
        if cleaned != url:
            self.cache.set(OUTGOING, key, cleaned)
        return cleaned

    def build(self, original: OriginalUrl, config: CleanUrlsConfig) -> Optional[CleanUrl]:
        """Run the route table over a parsed URL without touching the cache."""
        ctx = RouteContext(
            resolver=self.resolver,
            config=config,
            static_routes=self.static_routes,
            site_course_id=self.site_course_id,
        )
        found = find_original_route(self.routes, ctx, original)
        if found is None:
            return None

        route, match = found
        built = route.build(ctx, match, original)
        if built is None:
            logger.debug("Route %s matched %s but could not be resolved", route.name, original.path)
            return None

        logger.debug("Route %s cleaned %s", route.name, original.path)
        return CleanUrl(
            segments=built.segments,
            params=original.without(built.consumed),
            fragment=original.fragment,
        )
