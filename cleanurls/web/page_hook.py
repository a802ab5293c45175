"""
Head content injected into every rendered page.
"""

import json
import logging
from typing import Dict, Optional

from markupsafe import Markup

logger = logging.getLogger(__name__)

CLEANURL_NOTE = 'CLEANURL'


class LoggingNotes:
    """Note recorder that only logs, for hosts without a per-request context."""

    def __init__(self):
        self.notes: Dict[str, str] = {}

    def record_note(self, key: str, value: str) -> None:
        self.notes[key] = value
        logger.info("%s=%s", key, value)


def _js_string(value: str) -> str:
    return json.dumps(value).replace('</', '<\\/')


def pre_head_content(clean_url: str, raw_url: str, override_url: Optional[str] = None,
                     notes=None) -> str:
    """
    Build the tags that reconcile browser and crawler URLs with the clean URL.

    Args:
        clean_url: Clean form of the current page URL
        raw_url: URL the page was requested with
        override_url: Native URL the request was rewritten to, if any
        notes: Object with ``record_note(key, value)`` for log correlation

    Returns:
        HTML to place at the top of <head>, possibly empty
    """
    if override_url:
        # A rewritten request changes path depth, so relative links must resolve
        # against the native URL.
        return str(Markup("<base href='{}'>\n").format(override_url))

    if raw_url == clean_url:
        return ''

    # Runs before any other script so analytics only ever see the clean URL.
    output = Markup(
        "<script>history.replaceState && history.replaceState({}, '', "
        + _js_string(clean_url)
        + ");</script>\n"
    )
    output += Markup("<link rel='canonical' href='{}' />\n").format(clean_url)

    if notes is None:
        notes = LoggingNotes()
    notes.record_note(CLEANURL_NOTE, clean_url)

    return str(output)
