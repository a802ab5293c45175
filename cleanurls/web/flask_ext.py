"""
Flask and WSGI integration.

``UncleanMiddleware`` rewrites inbound clean URLs to native ones before the
host application routes them. ``FlaskCleanUrls`` installs the middleware on a
Flask app and gives templates the head snippet and a cleaning ``url_for``.
"""

import logging
from urllib.parse import unquote, urlsplit

from flask import Flask, request, url_for
from markupsafe import Markup
from werkzeug.wsgi import get_current_url

from .page_hook import CLEANURL_NOTE, pre_head_content

logger = logging.getLogger(__name__)

UNCLEANED_URL_KEY = 'cleanurls.uncleaned_url'
REQUESTED_URL_KEY = 'cleanurls.requested_url'
NOTES_KEY = 'cleanurls.notes'
CLEAN_URL_HEADER = 'X-Clean-Url'


class EnvironNotes:
    """Records notes in the WSGI environ, where access loggers can pick them up."""

    def __init__(self, environ):
        self.environ = environ

    def record_note(self, key: str, value: str) -> None:
        self.environ.setdefault(NOTES_KEY, {})[key] = value
        logger.info("%s=%s", key, value)


class UncleanMiddleware:
    """
    WSGI middleware resolving clean request URLs.

    When a request URL is uncleaned, ``PATH_INFO`` and ``QUERY_STRING`` are
    replaced by the native ones and both URLs are left in the environ.
    """

    def __init__(self, wsgi_app, engine):
        self.wsgi_app = wsgi_app
        self.engine = engine

    def __call__(self, environ, start_response):
        requested = get_current_url(environ)
        native = self.engine.unclean(requested)
        if native != requested:
            self._rewrite(environ, requested, native)
        return self.wsgi_app(environ, start_response)

    def _rewrite(self, environ, requested: str, native: str) -> None:
        parts = urlsplit(native)
        script_name = environ.get('SCRIPT_NAME', '')
        path = unquote(parts.path)
        if script_name and path.startswith(script_name):
            path = path[len(script_name):]
        # WSGI strings are latin-1 decoded bytes.
        environ['PATH_INFO'] = path.encode('utf-8').decode('latin-1')
        environ['QUERY_STRING'] = parts.query
        environ[REQUESTED_URL_KEY] = requested
        environ[UNCLEANED_URL_KEY] = native
        logger.debug("Uncleaned %s -> %s", requested, native)


class FlaskCleanUrls:
    """Flask extension wiring a cleanurls engine into an application."""

    def __init__(self, app: Flask = None, engine=None):
        self.engine = engine
        if app is not None:
            self.init_app(app, engine)

    def init_app(self, app: Flask, engine=None) -> None:
        if engine is not None:
            self.engine = engine
        if self.engine is None:
            raise ValueError("FlaskCleanUrls needs an engine")

        app.wsgi_app = UncleanMiddleware(app.wsgi_app, self.engine)
        app.extensions['cleanurls'] = self.engine
        app.context_processor(self._template_helpers)
        app.after_request(self._publish_clean_url)

    def head_content(self) -> Markup:
        """Head snippet for the current request."""
        raw = request.url
        clean = self.engine.clean(raw)
        override = request.environ.get(UNCLEANED_URL_KEY)
        html = pre_head_content(clean, raw, override, EnvironNotes(request.environ))
        return Markup(html)

    def clean_url_for(self, endpoint: str, **values) -> str:
        return self.engine.clean(url_for(endpoint, _external=True, **values))

    def _template_helpers(self):
        return {
            'cleanurls_head': self.head_content,
            'clean_url_for': self.clean_url_for,
        }

    def _publish_clean_url(self, response):
        clean = request.environ.get(NOTES_KEY, {}).get(CLEANURL_NOTE)
        if clean:
            response.headers[CLEAN_URL_HEADER] = clean
        return response
