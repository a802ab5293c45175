"""
In-memory entity store with a streaming JSON snapshot loader.

The snapshot is a single JSON document exported from the host platform:

    {
      "categories": [{"id": 5, "name": "Arts", "parent": 0}],
      "courses":    [{"id": 2, "shortname": "art101", "fullname": "...", "category": 5}],
      "users":      [{"id": 3, "username": "jdoe"}],
      "modules":    [{"id": 42, "course": 2, "modname": "forum", "name": "News"}]
    }
"""

import logging
from typing import Callable, Dict, Iterator, Optional

import ijson

from ..core.errors import EntityStoreError
from ..core.types import Category, Course, CourseModule, User

logger = logging.getLogger(__name__)


def _category(item: Dict) -> Category:
    return Category(id=int(item['id']), name=str(item.get('name', '')), parent=int(item.get('parent') or 0))


def _course(item: Dict) -> Course:
    return Course(
        id=int(item['id']),
        shortname=str(item['shortname']),
        fullname=str(item.get('fullname', '')),
        category=int(item.get('category') or 0),
    )


def _user(item: Dict) -> User:
    return User(id=int(item['id']), username=str(item['username']))


def _module(item: Dict) -> CourseModule:
    return CourseModule(
        id=int(item['id']),
        course=int(item['course']),
        modname=str(item['modname']),
        name=str(item.get('name', '')),
    )


SECTIONS: Dict[str, Callable[[Dict], object]] = {
    'categories': _category,
    'courses': _course,
    'users': _user,
    'modules': _module,
}


class MemoryEntityStore:
    """Read-mostly store of categories, courses, users and course modules."""

    def __init__(self):
        self.categories: Dict[int, Category] = {}
        self.courses: Dict[int, Course] = {}
        self.users: Dict[int, User] = {}
        self.modules: Dict[int, CourseModule] = {}
        self._course_by_shortname: Dict[str, Course] = {}
        self._user_by_username: Dict[str, User] = {}

    def add_category(self, category: Category) -> Category:
        self.categories[category.id] = category
        return category

    def add_course(self, course: Course) -> Course:
        old = self.courses.get(course.id)
        if old is not None:
            self._course_by_shortname.pop(old.shortname, None)
        self.courses[course.id] = course
        self._course_by_shortname[course.shortname] = course
        return course

    def add_user(self, user: User) -> User:
        old = self.users.get(user.id)
        if old is not None:
            self._user_by_username.pop(old.username, None)
        self.users[user.id] = user
        self._user_by_username[user.username] = user
        return user

    def add_module(self, module: CourseModule) -> CourseModule:
        self.modules[module.id] = module
        return module

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.categories.get(category_id)

    def get_course(self, course_id: int) -> Optional[Course]:
        return self.courses.get(course_id)

    def get_course_by_shortname(self, shortname: str) -> Optional[Course]:
        return self._course_by_shortname.get(shortname)

    def get_user(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self._user_by_username.get(username)

    def get_course_module(self, cmid: int) -> Optional[CourseModule]:
        return self.modules.get(cmid)

    def has_module_type(self, modname: str) -> bool:
        return any(module.modname == modname for module in self.modules.values())

    @classmethod
    def load_snapshot(cls, file_path: str) -> 'MemoryEntityStore':
        """
        Build a store from a snapshot file using a streaming parser.

        Args:
            file_path: Path to the snapshot JSON file

        Returns:
            Populated MemoryEntityStore

        Raises:
            EntityStoreError: If the file cannot be read or is not valid JSON
        """
        store = cls()
        adders = {
            'categories': store.add_category,
            'courses': store.add_course,
            'users': store.add_user,
            'modules': store.add_module,
        }

        logger.info("Loading entity snapshot %s", file_path)
        try:
            with open(file_path, 'rb') as f:
                for section, build in SECTIONS.items():
                    f.seek(0)
                    count = 0
                    for item in _items(f, section):
                        adders[section](build(item))
                        count += 1
                    logger.info("  %s: %d", section, count)
        except OSError as e:
            raise EntityStoreError(f"Cannot read snapshot {file_path}: {e}") from e
        except (ijson.JSONError, KeyError, TypeError, ValueError) as e:
            raise EntityStoreError(f"Invalid snapshot {file_path}: {e}") from e

        return store


def _items(f, section: str) -> Iterator[Dict]:
    return ijson.items(f, f'{section}.item')
