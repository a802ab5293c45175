"""Route table and slug providers."""

from .route_table import ROUTES, Route, RouteContext, Built, Parsed
from .slugs import CategorySlugs, CourseSlugs, ModuleSlugs, UserSlugs, slugify

__all__ = [
    "ROUTES",
    "Route",
    "RouteContext",
    "Built",
    "Parsed",
    "CategorySlugs",
    "CourseSlugs",
    "ModuleSlugs",
    "UserSlugs",
    "slugify",
]
