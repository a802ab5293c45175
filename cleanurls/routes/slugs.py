"""
Slug generation and parsing for clean path segments.

Each entity kind has its own provider: ``slug`` turns an entity into an
escaped path segment and ``identify`` turns a segment back into the value
used to look the entity up again.
"""

import re
from typing import Optional
from unicodedata import normalize
from urllib.parse import quote, unquote

from ..core.types import Category, Course, CourseModule, User

CONTRACTION_PATTERN = re.compile(r"(\w)['’](\w)")
NON_ALPHANUMERIC_PATTERN = re.compile(r"[\W_]+")
TRAILING_ID_PATTERN = re.compile(r'-(\d+)$')
LEADING_ID_PATTERN = re.compile(r'^(\d+)(?:-|$)')


def slugify(text: str) -> str:
    """
    Make an ASCII slug of text.

    >>> slugify("A Test Forum")
    'a-test-forum'
    >>> slugify("Café & Résumé")
    'cafe-resume'
    >>> slugify("Don't Panic")
    'dont-panic'
    >>> slugify("---")
    ''
    """
    slug = normalize('NFKD', text).encode('ascii', 'ignore').decode()
    slug = CONTRACTION_PATTERN.sub(r'\1\2', slug.lower())
    return NON_ALPHANUMERIC_PATTERN.sub('-', slug).strip('-')


def escape_segment(value: str, safe: str = '') -> str:
    """Percent-escape a value so it fits in one path segment (``#`` -> ``%23``)."""
    return quote(value, safe=safe)


class CourseSlugs:
    """Courses are addressed by their escaped shortname."""

    def slug(self, course: Course) -> str:
        return escape_segment(course.shortname)

    def identify(self, segment: str) -> str:
        return unquote(segment)


class UserSlugs:
    """Users are addressed by username; ``@`` is left readable."""

    def slug(self, user: User) -> str:
        return escape_segment(user.username, safe='@')

    def identify(self, segment: str) -> str:
        return unquote(segment)


class CategorySlugs:
    """Categories are addressed by ``<slugified name>-<id>``; only the id is significant."""

    def slug(self, category: Category) -> str:
        name = slugify(category.name)
        return f'{name}-{category.id}' if name else f'category-{category.id}'

    def identify(self, segment: str) -> Optional[int]:
        match = TRAILING_ID_PATTERN.search(segment)
        return int(match.group(1)) if match else None


class ModuleSlugs:
    """Course modules are addressed by ``<cmid>-<slugified name>``; only the id is significant."""

    def slug(self, module: CourseModule) -> str:
        name = slugify(module.name)
        return f'{module.id}-{name}' if name else str(module.id)

    def identify(self, segment: str) -> Optional[int]:
        match = LEADING_ID_PATTERN.match(segment)
        return int(match.group(1)) if match else None


COURSE_SLUGS = CourseSlugs()
USER_SLUGS = UserSlugs()
CATEGORY_SLUGS = CategorySlugs()
MODULE_SLUGS = ModuleSlugs()
