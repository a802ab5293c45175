"""
Type definitions for URL cleaning.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit


Params = Tuple[Tuple[str, str], ...]


def merge_params(pairs: Iterable[Tuple[str, str]]) -> Params:
    """
    Collapse repeated query names, last value wins.

    A repeated name keeps the position of its first occurrence, so
    ``course=1&id=3&course=2`` becomes ``(('course', '2'), ('id', '3'))``.
    """
    merged: Dict[str, str] = {}
    for name, value in pairs:
        merged[name] = value
    return tuple(merged.items())


def _split_relative(url: str, wwwroot: str) -> Optional[str]:
    """Return the part of ``url`` below ``wwwroot``, or None if it is elsewhere."""
    if url == wwwroot:
        return '/'
    if not url.startswith(wwwroot):
        return None
    relative = url[len(wwwroot):]
    if relative[0] not in '/?#':
        return None
    return relative


def _tail(params: Params, fragment: str) -> str:
    out = ''
    if params:
        out += '?' + urlencode(params)
    if fragment:
        out += '#' + fragment
    return out


@dataclass(frozen=True)
class OriginalUrl:
    """A platform-native URL: script path plus query parameters."""
    path: str
    params: Params = ()
    fragment: str = ''

    @classmethod
    def parse(cls, url: str, wwwroot: str) -> Optional['OriginalUrl']:
        """
        Parse an absolute URL relative to the site root.

        Args:
            url: Absolute URL as rendered or requested
            wwwroot: Site root without a trailing slash

        Returns:
            OriginalUrl, or None when the URL is not below wwwroot
        """
        relative = _split_relative(url, wwwroot)
        if relative is None:
            return None
        parts = urlsplit(relative)
        return cls(
            path=parts.path or '/',
            params=merge_params(parse_qsl(parts.query, keep_blank_values=True)),
            fragment=parts.fragment,
        )

    def get(self, name: str) -> Optional[str]:
        for key, value in self.params:
            if key == name:
                return value
        return None

    def without(self, names: Iterable[str]) -> Params:
        """Parameters not named in ``names``, in original order."""
        names = set(names)
        return tuple((k, v) for k, v in self.params if k not in names)

    def out(self, wwwroot: str) -> str:
        return wwwroot + self.path + _tail(self.params, self.fragment)

    def same_resource(self, other: 'OriginalUrl') -> bool:
        """True when both URLs address the same script with the same parameters."""
        return self.path == other.path and dict(self.params) == dict(other.params)


@dataclass(frozen=True)
class CleanUrl:
    """A human-readable URL: path segments plus leftover query parameters."""
    segments: Tuple[str, ...]
    params: Params = ()
    fragment: str = ''

    @classmethod
    def parse(cls, url: str, wwwroot: str) -> Optional['CleanUrl']:
        relative = _split_relative(url, wwwroot)
        if relative is None:
            return None
        parts = urlsplit(relative)
        return cls(
            segments=tuple(s for s in parts.path.split('/') if s),
            params=merge_params(parse_qsl(parts.query, keep_blank_values=True)),
            fragment=parts.fragment,
        )

    @property
    def path(self) -> str:
        """Escaped path as it appears in the URL, always with a leading slash."""
        return '/' + '/'.join(self.segments)

    def out(self, wwwroot: str) -> str:
        return wwwroot + self.path + _tail(self.params, self.fragment)


@dataclass(frozen=True)
class Category:
    """A course category. ``parent`` is 0 for top level categories."""
    id: int
    name: str
    parent: int = 0


@dataclass(frozen=True)
class Course:
    id: int
    shortname: str
    fullname: str = ''
    category: int = 0


@dataclass(frozen=True)
class CourseModule:
    """An activity instance in a course, addressed by its course module id."""
    id: int
    course: int
    modname: str
    name: str


@dataclass(frozen=True)
class User:
    id: int
    username: str


@dataclass(frozen=True)
class ModuleInCourse:
    """A course module together with the course that owns it."""
    module: CourseModule
    course: Course
