"""
Plugin configuration and the sources it is read from.
"""

import os
from typing import Any, Dict, Mapping, Optional

PLUGIN = 'local_cleanurls'

TRUE_STRINGS = {'1', 'true', 'yes', 'on'}


def to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


class DictConfigSource:
    """
    In-process settings store, keyed by plugin then setting name.

    Mirrors the host platform's ``get_config``/``set_config`` pair so tests
    and embedding applications can flip settings between requests.
    """

    def __init__(self, settings: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._settings: Dict[str, Dict[str, Any]] = {
            plugin: dict(values) for plugin, values in (settings or {}).items()
        }

    def get(self, name: str, plugin: str = PLUGIN) -> Any:
        return self._settings.get(plugin, {}).get(name)

    def set(self, name: str, value: Any, plugin: str = PLUGIN) -> None:
        self._settings.setdefault(plugin, {})[name] = value


class EnvConfigSource:
    """Reads settings from ``CLEANURLS_<NAME>`` environment variables."""

    def __init__(self, prefix: str = 'CLEANURLS_', environ: Optional[Mapping[str, str]] = None):
        self.prefix = prefix
        self.environ = os.environ if environ is None else environ

    def get(self, name: str, plugin: str = PLUGIN) -> Any:
        return self.environ.get(self.prefix + name.upper())


class CleanUrlsConfig:
    """Configuration for URL cleaning."""

    def __init__(self, cleaning_on: bool = True, clean_usernames: bool = True):
        """
        Initialize cleaning configuration.

        Args:
            cleaning_on: Master switch. When False, outgoing URLs are returned
                         untouched and the cache is never consulted.
                         Default: True

            clean_usernames: If True, usernames appear in clean paths
                             (``/user/theusername``). When False every route that
                             needs a username leaves the URL alone.
                             Default: True
        """
        self.cleaning_on = cleaning_on
        self.clean_usernames = clean_usernames

    @classmethod
    def from_source(cls, source) -> 'CleanUrlsConfig':
        """Read the current settings; unset values fall back to the defaults."""
        return cls(
            cleaning_on=to_bool(source.get('cleaningon', PLUGIN), True),
            clean_usernames=to_bool(source.get('cleanusernames', PLUGIN), True),
        )

    def __repr__(self) -> str:
        return (f"CleanUrlsConfig(cleaning_on={self.cleaning_on}, "
                f"clean_usernames={self.clean_usernames})")
