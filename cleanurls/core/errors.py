"""
Exception hierarchy for the URL cleaning engine.

Only collaborator failures are errors. Anything the engine cannot resolve
(unknown entity, unrecognised path, disabled cleaning) is an identity
transform, never an exception.
"""


class CleanUrlsError(Exception):
    """Base class for all errors raised by cleanurls."""


class EntityStoreError(CleanUrlsError):
    """The entity data store is unreachable or returned unreadable data."""


class PathCacheError(CleanUrlsError):
    """The path cache backend could not be read or written."""
