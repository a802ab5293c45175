"""Integration tests for the Flask host application."""

import pytest

from app import app, build_engine, cleanurls, engine
from cleanurls import CleanUrlsConfig
from cleanurls.core.types import Course, CourseModule, User
from cleanurls.processors import outgoing_key
from cleanurls.storage import OUTGOING

SITE = 'http://localhost:5001'


@pytest.fixture
def client():
    """Create a test client for the Flask app."""
    with app.test_client() as client:
        yield client


@pytest.fixture(autouse=True)
def site(monkeypatch):
    """Populate the app's store and start from an empty cache with default settings."""
    app.config.update(TESTING=True, SERVER_NAME='localhost:5001')
    monkeypatch.delenv('CLEANURLS_CLEANINGON', raising=False)
    monkeypatch.delenv('CLEANURLS_CLEANUSERNAMES', raising=False)
    engine.cache.purge()
    engine.store.add_course(Course(id=1, shortname='site'))
    engine.store.add_course(Course(id=2, shortname='art101'))
    engine.store.add_user(User(id=3, username='jdoe'))
    engine.store.add_module(CourseModule(id=42, course=2, modname='forum', name='Announcements'))
    yield
    engine.cache.purge()


def test_default_site_root_matches_served_port(monkeypatch):
    monkeypatch.delenv('CLEANURLS_WWWROOT', raising=False)

    assert build_engine().wwwroot == SITE


class TestCleanApi:
    """Tests for /api/clean and /api/unclean."""

    def test_clean(self, client):
        response = client.get('/api/clean', query_string={'url': f'{SITE}/mod/forum/view.php?id=42'})

        assert response.status_code == 200
        assert response.get_json() == {
            'url': f'{SITE}/mod/forum/view.php?id=42',
            'clean': f'{SITE}/course/art101/forum/42-announcements',
        }

    def test_clean_requires_url(self, client):
        response = client.get('/api/clean')

        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_unclean(self, client):
        response = client.get('/api/unclean', query_string={'url': f'{SITE}/user/jdoe?course=1'})

        assert response.status_code == 200
        assert response.get_json()['original'] == f'{SITE}/user/view.php?id=3&course=1'

    def test_unclean_requires_url(self, client):
        assert client.get('/api/unclean').status_code == 400

    def test_clean_respects_environment_switch(self, client, monkeypatch):
        monkeypatch.setenv('CLEANURLS_CLEANINGON', '0')
        url = f'{SITE}/course/view.php?id=2'

        response = client.get('/api/clean', query_string={'url': url})

        assert response.get_json()['clean'] == url


class TestCachePurgeApi:
    """Tests for /api/cache/purge."""

    def test_purge_all(self, client):
        engine.clean(f'{SITE}/course/view.php?id=2')

        response = client.post('/api/cache/purge')

        assert response.status_code == 200
        assert response.get_json() == {'purged': 1}
        assert engine.cache.get(OUTGOING, outgoing_key(f'{SITE}/course/view.php?id=2', CleanUrlsConfig())) is None

    def test_purge_invalid_namespace(self, client):
        response = client.post('/api/cache/purge', data={'namespace': 'sideways'})

        assert response.status_code == 400
        assert 'Invalid namespace' in response.get_json()['error']


class TestRequestRewriting:
    """Tests for inbound uncleaning and page decoration."""

    def test_clean_request_is_routed_to_script(self, client):
        response = client.get('/course/art101')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert '<h1>/course/view.php</h1>' in body
        assert '<li>name = art101</li>' in body
        assert f"<base href='{SITE}/course/view.php?name=art101'>" in body
        assert 'X-Clean-Url' not in response.headers

    def test_legacy_request_gets_canonical_link(self, client):
        response = client.get('/course/view.php?id=2')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert f"<link rel='canonical' href='{SITE}/course/art101' />" in body
        assert 'history.replaceState' in body
        assert response.headers['X-Clean-Url'] == f'{SITE}/course/art101'

    def test_uncleanable_request_is_left_alone(self, client):
        response = client.get('/course/view.php?id=999')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert 'canonical' not in body
        assert '<base' not in body

    def test_no_canonical_when_cleaning_is_off(self, client, monkeypatch):
        monkeypatch.setenv('CLEANURLS_CLEANINGON', '0')

        response = client.get('/course/view.php?id=2')

        assert 'canonical' not in response.get_data(as_text=True)
        assert 'X-Clean-Url' not in response.headers

    def test_unknown_clean_path_is_not_found(self, client):
        assert client.get('/user/nobody').status_code == 404

    def test_clean_url_for(self):
        with app.test_request_context():
            url = cleanurls.clean_url_for('platform_script', script='user/profile', id=3)

        assert url == f'{SITE}/user/jdoe'
