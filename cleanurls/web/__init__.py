"""Page decoration and web framework integration."""

from .page_hook import LoggingNotes, pre_head_content
from .flask_ext import EnvironNotes, FlaskCleanUrls, UncleanMiddleware

__all__ = ["LoggingNotes", "pre_head_content", "EnvironNotes", "FlaskCleanUrls", "UncleanMiddleware"]
