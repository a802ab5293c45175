"""
Pytest configuration and shared fixtures for cleanurls tests.
"""
import itertools
import json

import pytest

from cleanurls import CleanUrls, DictConfigSource
from cleanurls.core.types import Category, Course, CourseModule, User
from cleanurls.resolvers import MemoryEntityStore
from cleanurls.storage import MemoryPathCache

WWWROOT = 'http://www.example.com/moodle'


class SiteGenerator:
    """Creates platform entities with increasing ids, like the platform's test data generator."""

    def __init__(self, store: MemoryEntityStore):
        self.store = store
        self._category_ids = itertools.count(1)
        self._course_ids = itertools.count(2)
        self._user_ids = itertools.count(2)
        self._cmids = itertools.count(1)
        store.add_course(Course(id=1, shortname='site', fullname='Site home'))

    def create_category(self, name='category', parent=0):
        return self.store.add_category(Category(id=next(self._category_ids), name=name, parent=parent))

    def create_course(self, shortname, fullname='', category=0):
        return self.store.add_course(Course(id=next(self._course_ids), shortname=shortname,
                                            fullname=fullname, category=category))

    def create_user(self, username):
        return self.store.add_user(User(id=next(self._user_ids), username=username))

    def create_module(self, modname, course, name):
        return self.store.add_module(CourseModule(id=next(self._cmids), course=course,
                                                  modname=modname, name=name))


@pytest.fixture
def dirroot(tmp_path):
    """A platform code tree with the files the collision rules look at."""
    root = tmp_path / 'moodle'
    for directory in ['course/ajax', 'user', 'mod/forum', 'lib', 'theme']:
        (root / directory).mkdir(parents=True)
    for script in ['course/view.php', 'course/index.php', 'course/enrol.php',
                   'user/view.php', 'user/profile.php', 'user/index.php',
                   'mod/forum/view.php', 'mod/forum/index.php', 'mod/forum/user.php']:
        (root / script).write_text('<?php\n')
    return root


@pytest.fixture
def store():
    return MemoryEntityStore()


@pytest.fixture
def generator(store):
    return SiteGenerator(store)


@pytest.fixture
def cache():
    return MemoryPathCache()


@pytest.fixture
def settings():
    return DictConfigSource()


@pytest.fixture
def engine(store, cache, settings, dirroot, generator):
    return CleanUrls(
        wwwroot=WWWROOT,
        store=store,
        cache=cache,
        config_source=settings,
        dirroot=str(dirroot),
    )


@pytest.fixture
def snapshot_data():
    """Sample entity snapshot, as exported from the platform."""
    return {
        "categories": [
            {"id": 5, "name": "Arts", "parent": 0},
            {"id": 6, "name": "Painting & Drawing", "parent": 5}
        ],
        "courses": [
            {"id": 1, "shortname": "site", "fullname": "Site home", "category": 0},
            {"id": 2, "shortname": "art101", "fullname": "Introduction to Art", "category": 6}
        ],
        "users": [
            {"id": 3, "username": "jdoe"}
        ],
        "modules": [
            {"id": 42, "course": 2, "modname": "forum", "name": "Announcements"}
        ]
    }


@pytest.fixture
def snapshot_file(tmp_path, snapshot_data):
    """Write the sample snapshot to a temporary file."""
    path = tmp_path / 'snapshot.json'
    path.write_text(json.dumps(snapshot_data))
    return path
