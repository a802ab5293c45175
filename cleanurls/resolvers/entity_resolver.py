"""
Read-only entity lookups used while building and parsing clean paths.
"""

import logging
from typing import List, Optional

from ..core.types import Category, Course, ModuleInCourse, User

logger = logging.getLogger(__name__)


class EntityResolver:
    """
    Facade over the host data store.

    Every lookup returns None when the entity does not exist. Errors raised by
    the store itself are not caught here.
    """

    def __init__(self, store):
        self.store = store

    def find_course_by_id(self, course_id: int) -> Optional[Course]:
        return self.store.get_course(course_id)

    def find_course_by_shortname(self, shortname: str) -> Optional[Course]:
        return self.store.get_course_by_shortname(shortname)

    def find_category_by_id(self, category_id: int) -> Optional[Category]:
        return self.store.get_category(category_id)

    def category_path(self, category_id: int) -> Optional[List[Category]]:
        """
        Walk a category's ancestors.

        Args:
            category_id: Leaf category id

        Returns:
            Categories ordered from the top level down to the leaf, or None if
            the leaf or any ancestor is missing or the chain loops
        """
        chain: List[Category] = []
        seen = set()
        current = category_id
        while current:
            if current in seen:
                logger.warning("Category %s has a parent loop", category_id)
                return None
            seen.add(current)
            category = self.store.get_category(current)
            if category is None:
                return None
            chain.append(category)
            current = category.parent
        chain.reverse()
        return chain or None

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        return self.store.get_user(user_id)

    def find_user_by_username(self, username: str) -> Optional[User]:
        return self.store.get_user_by_username(username)

    def find_module_by_cmid(self, cmid: int) -> Optional[ModuleInCourse]:
        """Course module with its owning course, or None if either is missing."""
        module = self.store.get_course_module(cmid)
        if module is None:
            return None
        course = self.store.get_course(module.course)
        if course is None:
            return None
        return ModuleInCourse(module=module, course=course)

    def module_type_exists(self, modname: str) -> bool:
        """True if the store holds at least one module of type ``modname``."""
        return self.store.has_module_type(modname)
