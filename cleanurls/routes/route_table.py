"""
Ordered route descriptors shared by the cleaner and the uncleaner.

Each route describes one URL shape in both directions:

- ``script`` + ``accepts`` recognise an original URL, ``build`` turns it into
  clean path segments;
- ``pattern`` + ``accepts_clean`` recognise a clean path, ``parse`` turns it
  back into an original script and parameters.

Routes are tried in order and the first one that recognises a URL decides
the outcome. When its build or parse step cannot resolve an entity the URL
is left unchanged; later routes are not tried.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple
from urllib.parse import unquote

from ..core.config import CleanUrlsConfig
from ..core.types import CleanUrl, OriginalUrl, Params
from ..resolvers import EntityResolver, FilesystemStaticRoutes
from .slugs import CATEGORY_SLUGS, COURSE_SLUGS, MODULE_SLUGS, USER_SLUGS, escape_segment

logger = logging.getLogger(__name__)

DIGITS = re.compile(r'^\d+$')
SCRIPT_SEGMENT = re.compile(r'\.php(?:/|$)')


@dataclass(frozen=True)
class RouteContext:
    """Everything a route needs to resolve entities for one clean/unclean call."""
    resolver: EntityResolver
    config: CleanUrlsConfig
    static_routes: FilesystemStaticRoutes
    site_course_id: int = 1


@dataclass(frozen=True)
class Built:
    """Clean path segments plus the original parameters they encode."""
    segments: Tuple[str, ...]
    consumed: Tuple[str, ...]


@dataclass(frozen=True)
class Parsed:
    """Original script path plus the parameters recovered from the clean path."""
    path: str
    params: Params


@dataclass(frozen=True)
class Route:
    name: str
    script: Optional[re.Pattern] = None
    accepts: Optional[Callable[[RouteContext, OriginalUrl], bool]] = None
    build: Optional[Callable[[RouteContext, re.Match, OriginalUrl], Optional[Built]]] = None
    pattern: Optional[re.Pattern] = None
    accepts_clean: Optional[Callable[[CleanUrl], bool]] = None
    parse: Optional[Callable[[RouteContext, re.Match, CleanUrl], Optional[Parsed]]] = None

    def match_original(self, ctx: RouteContext, url: OriginalUrl) -> Optional[re.Match]:
        if self.script is None or self.build is None:
            return None
        match = self.script.match(url.path)
        if match and (self.accepts is None or self.accepts(ctx, url)):
            return match
        return None

    def match_clean(self, url: CleanUrl) -> Optional[re.Match]:
        if self.pattern is None or self.parse is None:
            return None
        match = self.pattern.match(url.path)
        if match and (self.accepts_clean is None or self.accepts_clean(url)):
            return match
        return None


def int_param(url: OriginalUrl, name: str) -> Optional[int]:
    value = url.get(name)
    if value is None or not DIGITS.match(value):
        return None
    return int(value)


def _has_ids(*names: str) -> Callable[[RouteContext, OriginalUrl], bool]:
    return lambda ctx, url: all(int_param(url, name) is not None for name in names)


def _collides(ctx: RouteContext, segment: str) -> bool:
    """True if /course/<segment> would shadow a real file or directory."""
    if ctx.static_routes.collides('course/' + unquote(segment)):
        logger.debug("Not cleaning course '%s': path exists on disk", segment)
        return True
    return False


def is_script_path(path: str) -> bool:
    """True if some segment of ``path`` names a script, which is never uncleaned."""
    return bool(SCRIPT_SEGMENT.search(path))


def _course_slug(course) -> Optional[str]:
    segment = COURSE_SLUGS.slug(course)
    if is_script_path(segment):
        logger.debug("Not cleaning course '%s': shortname looks like a script", course.shortname)
        return None
    return segment


def _course_from_segment(ctx, segment):
    return ctx.resolver.find_course_by_shortname(COURSE_SLUGS.identify(segment))


# Categories.

def _build_category(ctx, match, url):
    chain = ctx.resolver.category_path(int_param(url, 'categoryid'))
    if chain is None:
        return None
    return Built(('category',) + tuple(CATEGORY_SLUGS.slug(c) for c in chain), ('categoryid',))


def _parse_category(ctx, match, url):
    category_id = CATEGORY_SLUGS.identify(url.segments[-1])
    if category_id is None or ctx.resolver.find_category_by_id(category_id) is None:
        return None
    return Parsed('/course/index.php', (('categoryid', str(category_id)),))


# Courses.

def _build_course_by_id(ctx, match, url):
    course = ctx.resolver.find_course_by_id(int_param(url, 'id'))
    if course is None:
        return None
    segment = _course_slug(course)
    if segment is None or _collides(ctx, segment):
        return None
    return Built(('course', segment), ('id',))


def _accepts_course_name(ctx, url):
    return bool(url.get('name'))


def _build_course_by_name(ctx, match, url):
    segment = escape_segment(url.get('name'))
    if is_script_path(segment) or _collides(ctx, segment):
        return None
    return Built(('course', segment), ('name',))


def _parse_course(ctx, match, url):
    # The segment is passed on still escaped, so '%23' becomes '%2523' in the query.
    return Parsed('/course/view.php', (('name', match.group(1)),))


# Course modules.

def _module_type_exists(ctx, modname):
    return (ctx.static_routes.exists(f'mod/{modname}/index.php')
            or ctx.resolver.module_type_exists(modname))


def _build_module_index(ctx, match, url):
    course = ctx.resolver.find_course_by_id(int_param(url, 'id'))
    if course is None:
        return None
    segment = _course_slug(course)
    if segment is None:
        return None
    return Built(('course', segment, match.group(1)), ('id',))


def _parse_module_index(ctx, match, url):
    course = _course_from_segment(ctx, match.group(1))
    if course is None or not _module_type_exists(ctx, match.group(2)):
        return None
    return Parsed(f'/mod/{match.group(2)}/index.php', (('id', str(course.id)),))


def _build_module_view(ctx, match, url):
    found = ctx.resolver.find_module_by_cmid(int_param(url, 'id'))
    if found is None or found.module.modname != match.group(1):
        return None
    segment = _course_slug(found.course)
    if segment is None:
        return None
    return Built(('course', segment, found.module.modname, MODULE_SLUGS.slug(found.module)), ('id',))


def _parse_module_view(ctx, match, url):
    cmid = MODULE_SLUGS.identify(match.group(3))
    if cmid is None:
        return None
    found = ctx.resolver.find_module_by_cmid(cmid)
    if found is None or found.module.modname != match.group(2):
        return None
    if found.course.shortname != COURSE_SLUGS.identify(match.group(1)):
        logger.debug("Module %s does not belong to course '%s'", cmid, match.group(1))
        return None
    return Parsed(f'/mod/{found.module.modname}/view.php', (('id', str(cmid)),))


# Users.

def _user_slug(ctx, user_id):
    if not ctx.config.clean_usernames:
        return None
    user = ctx.resolver.find_user_by_id(user_id)
    if user is None:
        return None
    segment = USER_SLUGS.slug(user)
    if is_script_path(segment):
        return None
    return segment


def _find_user(ctx, segment):
    return ctx.resolver.find_user_by_username(USER_SLUGS.identify(segment))


def _build_course_users(ctx, match, url):
    course = ctx.resolver.find_course_by_id(int_param(url, 'id'))
    if course is None:
        return None
    segment = _course_slug(course)
    if segment is None:
        return None
    return Built(('course', segment, 'user'), ('id',))


def _parse_course_users(ctx, match, url):
    course = _course_from_segment(ctx, match.group(1))
    if course is None:
        return None
    return Parsed('/user/index.php', (('id', str(course.id)),))


def _accepts_course_user(ctx, url):
    course_id = int_param(url, 'course')
    return int_param(url, 'id') is not None and course_id is not None and course_id != ctx.site_course_id


def _build_course_user(ctx, match, url):
    username = _user_slug(ctx, int_param(url, 'id'))
    if username is None:
        return None
    course = ctx.resolver.find_course_by_id(int_param(url, 'course'))
    if course is None:
        return None
    segment = _course_slug(course)
    if segment is None:
        return None
    return Built(('course', segment, 'user', username), ('id', 'course'))


def _parse_course_user(ctx, match, url):
    course = _course_from_segment(ctx, match.group(1))
    user = _find_user(ctx, match.group(2))
    if course is None or user is None:
        return None
    return Parsed('/user/view.php', (('id', str(user.id)), ('course', str(course.id))))


def _accepts_site_user(ctx, url):
    return int_param(url, 'id') is not None and int_param(url, 'course') == ctx.site_course_id


def _build_site_user(ctx, match, url):
    # 'course' stays in the query; the site course has no path segment.
    username = _user_slug(ctx, int_param(url, 'id'))
    if username is None:
        return None
    return Built(('user', username), ('id',))


def _has_course_query(url):
    return any(name == 'course' for name, _ in url.params)


def _parse_site_user(ctx, match, url):
    user = _find_user(ctx, match.group(1))
    if user is None:
        return None
    return Parsed('/user/view.php', (('id', str(user.id)),))


def _accepts_profile(ctx, url):
    return int_param(url, 'id') is not None and url.get('course') is None


def _build_profile(ctx, match, url):
    username = _user_slug(ctx, int_param(url, 'id'))
    if username is None:
        return None
    return Built(('user', username), ('id',))


def _parse_profile(ctx, match, url):
    user = _find_user(ctx, match.group(1))
    if user is None:
        return None
    return Parsed('/user/profile.php', (('id', str(user.id)),))


def _accepts_discussions(ctx, url):
    return url.get('mode') == 'discussions' and int_param(url, 'id') is not None


def _build_discussions(ctx, match, url):
    username = _user_slug(ctx, int_param(url, 'id'))
    if username is None:
        return None
    return Built(('user', username, 'discussions'), ('mode', 'id'))


def _parse_discussions(ctx, match, url):
    user = _find_user(ctx, match.group(1))
    if user is None:
        return None
    return Parsed('/mod/forum/user.php', (('mode', 'discussions'), ('id', str(user.id))))


ROUTES: Tuple[Route, ...] = (
    Route(
        name='category',
        script=re.compile(r'^/course/index\.php$'),
        accepts=_has_ids('categoryid'),
        build=_build_category,
        pattern=re.compile(r'^/category(?:/[^/]+)+$'),
        parse=_parse_category,
    ),
    Route(
        name='course_by_id',
        script=re.compile(r'^/course/view\.php$'),
        accepts=_has_ids('id'),
        build=_build_course_by_id,
    ),
    Route(
        name='course_by_name',
        script=re.compile(r'^/course/view\.php$'),
        accepts=_accepts_course_name,
        build=_build_course_by_name,
        pattern=re.compile(r'^/course/([^/]+)$'),
        parse=_parse_course,
    ),
    Route(
        name='course_users',
        script=re.compile(r'^/user/index\.php$'),
        accepts=_has_ids('id'),
        build=_build_course_users,
        pattern=re.compile(r'^/course/([^/]+)/user$'),
        parse=_parse_course_users,
    ),
    Route(
        name='course_user',
        script=re.compile(r'^/user/view\.php$'),
        accepts=_accepts_course_user,
        build=_build_course_user,
        pattern=re.compile(r'^/course/([^/]+)/user/([^/]+)$'),
        parse=_parse_course_user,
    ),
    Route(
        name='module_index',
        script=re.compile(r'^/mod/(\w+)/index\.php$'),
        accepts=_has_ids('id'),
        build=_build_module_index,
        pattern=re.compile(r'^/course/([^/]+)/(\w+)$'),
        parse=_parse_module_index,
    ),
    Route(
        name='module_view',
        script=re.compile(r'^/mod/(\w+)/view\.php$'),
        accepts=_has_ids('id'),
        build=_build_module_view,
        pattern=re.compile(r'^/course/([^/]+)/(\w+)/([^/]+)$'),
        parse=_parse_module_view,
    ),
    Route(
        name='user_discussions',
        script=re.compile(r'^/mod/forum/user\.php$'),
        accepts=_accepts_discussions,
        build=_build_discussions,
        pattern=re.compile(r'^/user/([^/]+)/discussions$'),
        parse=_parse_discussions,
    ),
    Route(
        name='site_user',
        script=re.compile(r'^/user/view\.php$'),
        accepts=_accepts_site_user,
        build=_build_site_user,
        pattern=re.compile(r'^/user/([^/]+)$'),
        accepts_clean=_has_course_query,
        parse=_parse_site_user,
    ),
    Route(
        name='user_profile',
        script=re.compile(r'^/user/profile\.php$'),
        accepts=_accepts_profile,
        build=_build_profile,
        pattern=re.compile(r'^/user/([^/]+)$'),
        parse=_parse_profile,
    ),
)


def find_original_route(routes, ctx: RouteContext, url: OriginalUrl) -> Optional[Tuple[Route, re.Match]]:
    for route in routes:
        match = route.match_original(ctx, url)
        if match:
            return route, match
    return None


def find_clean_route(routes, url: CleanUrl) -> Optional[Tuple[Route, re.Match]]:
    for route in routes:
        match = route.match_clean(url)
        if match:
            return route, match
    return None
