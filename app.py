#!/usr/bin/env python3
"""
Flask Web Application for Clean URLs
Serves platform scripts behind the unclean middleware and provides REST API
endpoints for cleaning and uncleaning URLs.

Environment:
  CLEANURLS_WWWROOT         public site root (default: http://localhost:5001)
  CLEANURLS_SNAPSHOT        entity snapshot JSON file (optional)
  CLEANURLS_DIRROOT         platform code directory (optional)
  CLEANURLS_CACHE_DIR       directory for a shared file cache (optional)
  CLEANURLS_CLEANINGON      '0' to switch cleaning off
  CLEANURLS_CLEANUSERNAMES  '0' to keep usernames out of URLs
"""

from flask import Flask, request, jsonify, render_template_string
import os
from cleanurls import CleanUrls, CleanUrlsError, EnvConfigSource
from cleanurls.resolvers import MemoryEntityStore
from cleanurls.storage import FilePathCache, MemoryPathCache
from cleanurls.web import FlaskCleanUrls

PAGE_TEMPLATE = """<!doctype html>
<html>
<head>
{{ cleanurls_head() }}<title>{{ script }}</title>
</head>
<body>
<h1>{{ script }}</h1>
<ul>
{% for name, value in params %}<li>{{ name }} = {{ value }}</li>
{% endfor %}</ul>
</body>
</html>
"""


def build_engine():
    snapshot = os.environ.get('CLEANURLS_SNAPSHOT')
    store = MemoryEntityStore.load_snapshot(snapshot) if snapshot else MemoryEntityStore()
    cache_dir = os.environ.get('CLEANURLS_CACHE_DIR')
    cache = FilePathCache(cache_dir) if cache_dir else MemoryPathCache()
    return CleanUrls(
        wwwroot=os.environ.get('CLEANURLS_WWWROOT', 'http://localhost:5001'),
        store=store,
        cache=cache,
        config_source=EnvConfigSource(),
        dirroot=os.environ.get('CLEANURLS_DIRROOT'),
    )


app = Flask(__name__)
engine = build_engine()
cleanurls = FlaskCleanUrls(app, engine)


@app.route('/<path:script>.php')
def platform_script(script):
    """Stand-in for a platform script; renders the head snippet and its parameters."""
    return render_template_string(
        PAGE_TEMPLATE,
        script=f'/{script}.php',
        params=sorted(request.args.items()),
    )


@app.route('/api/clean')
def clean_api():
    """
    API endpoint to clean a URL.
    Accepts: query parameter 'url' (absolute native URL)
    Returns: JSON {'url': ..., 'clean': ...}
    """
    url = request.args.get('url')
    if not url:
        return jsonify({'error': 'No url provided'}), 400

    try:
        return jsonify({'url': url, 'clean': engine.clean(url)})
    except CleanUrlsError as e:
        return jsonify({'error': str(e)}), 500


@app.route('/api/unclean')
def unclean_api():
    """
    API endpoint to unclean a URL.
    Accepts: query parameter 'url' (absolute clean URL)
    Returns: JSON {'url': ..., 'original': ...}
    """
    url = request.args.get('url')
    if not url:
        return jsonify({'error': 'No url provided'}), 400

    try:
        return jsonify({'url': url, 'original': engine.unclean(url)})
    except CleanUrlsError as e:
        return jsonify({'error': str(e)}), 500


@app.route('/api/cache/purge', methods=['POST'])
def purge_cache_api():
    """
    API endpoint to purge cached mappings.
    Accepts: form or query field 'namespace' ('outgoing'|'incoming', optional: all)
    Returns: JSON {'purged': <entries removed>}
    """
    namespace = request.values.get('namespace') or None

    try:
        return jsonify({'purged': engine.cache.purge(namespace)})
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except CleanUrlsError as e:
        return jsonify({'error': str(e)}), 500


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5001)
