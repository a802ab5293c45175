"""
Path cache module for memoizing URL mappings.

Two namespaces are kept apart: ``outgoing`` maps original URLs to clean ones
and ``incoming`` maps clean URLs back to originals. Entries never expire; they
are memoizations of a deterministic function and are dropped only by purge.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..core.errors import PathCacheError

logger = logging.getLogger(__name__)

OUTGOING = 'outgoing'
INCOMING = 'incoming'
NAMESPACES: Tuple[str, ...] = (OUTGOING, INCOMING)


def _check_namespace(namespace: str) -> None:
    if namespace not in NAMESPACES:
        raise ValueError(f"Invalid namespace '{namespace}'. Must be one of: {list(NAMESPACES)}")


class MemoryPathCache:
    """Process-local cache, safe to share between request threads."""

    def __init__(self):
        self._entries: Dict[str, Dict[str, str]] = {ns: {} for ns in NAMESPACES}
        self._lock = threading.Lock()

    def get(self, namespace: str, key: str) -> Optional[str]:
        _check_namespace(namespace)
        with self._lock:
            return self._entries[namespace].get(key)

    def set(self, namespace: str, key: str, value: str) -> None:
        _check_namespace(namespace)
        with self._lock:
            self._entries[namespace][key] = value

    def purge(self, namespace: Optional[str] = None) -> int:
        """
        Drop cached entries.

        Args:
            namespace: Namespace to clear, or None for all of them

        Returns:
            Number of entries removed
        """
        targets = NAMESPACES if namespace is None else (namespace,)
        removed = 0
        with self._lock:
            for ns in targets:
                _check_namespace(ns)
                removed += len(self._entries[ns])
                self._entries[ns] = {}
        return removed

    def __len__(self) -> int:
        with self._lock:
            return sum(len(entries) for entries in self._entries.values())


class FilePathCache:
    """
    File-based cache shared by every process serving the same site.

    Files are stored as: {storage_dir}/{namespace}.json
    Each file holds a single JSON object mapping key URL to value URL. Reads
    are served from memory and refreshed when the file changes on disk; writes
    re-read the file first so concurrent writers lose at most the racing key.

    Args:
        storage_dir: Directory path for the namespace files
    """

    def __init__(self, storage_dir: str = 'cleanurls_cache'):
        self.storage_dir = Path(storage_dir)
        self._lock = threading.Lock()
        self._loaded: Dict[str, Tuple[Tuple[int, int, int], Dict[str, str]]] = {}
        self._ensure_storage_dir()

    def _ensure_storage_dir(self) -> None:
        """Create storage directory if it doesn't exist."""
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PathCacheError(f"Cannot create cache directory {self.storage_dir}: {e}") from e

    def _get_namespace_path(self, namespace: str) -> Path:
        return self.storage_dir / f'{namespace}.json'

    def _read(self, namespace: str, fresh: bool = False) -> Dict[str, str]:
        """Return the namespace contents, reloading if the file changed or ``fresh`` is set."""
        path = self._get_namespace_path(namespace)
        try:
            stat = path.stat()
        except FileNotFoundError:
            self._loaded.pop(namespace, None)
            return {}
        except OSError as e:
            raise PathCacheError(f"Cannot stat {path}: {e}") from e

        signature = (stat.st_ino, stat.st_mtime_ns, stat.st_size)
        loaded = self._loaded.get(namespace)
        if not fresh and loaded is not None and loaded[0] == signature:
            return loaded[1]

        try:
            with open(path, 'r', encoding='utf-8') as f:
                entries = json.load(f)
        except json.JSONDecodeError:
            logger.warning("Corrupted cache file %s, treating namespace '%s' as empty", path, namespace)
            entries = {}
        except OSError as e:
            raise PathCacheError(f"Cannot read {path}: {e}") from e

        if not isinstance(entries, dict):
            logger.warning("Unexpected content in %s, treating namespace '%s' as empty", path, namespace)
            entries = {}

        self._loaded[namespace] = (signature, entries)
        return entries

    def _write(self, namespace: str, entries: Dict[str, str]) -> None:
        path = self._get_namespace_path(namespace)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.storage_dir, prefix=f'.{namespace}.', suffix='.tmp')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(entries, f, indent=2, sort_keys=True)
            os.replace(tmp_name, path)
            stat = path.stat()
            self._loaded[namespace] = ((stat.st_ino, stat.st_mtime_ns, stat.st_size), entries)
        except OSError as e:
            raise PathCacheError(f"Cannot write {path}: {e}") from e

    def get(self, namespace: str, key: str) -> Optional[str]:
        _check_namespace(namespace)
        with self._lock:
            return self._read(namespace).get(key)

    def set(self, namespace: str, key: str, value: str) -> None:
        _check_namespace(namespace)
        with self._lock:
            entries = dict(self._read(namespace, fresh=True))
            entries[key] = value
            self._write(namespace, entries)

    def purge(self, namespace: Optional[str] = None) -> int:
        """
        Remove namespace files.

        Args:
            namespace: Namespace to clear, or None for all of them

        Returns:
            Number of entries removed
        """
        targets = NAMESPACES if namespace is None else (namespace,)
        removed = 0
        with self._lock:
            for ns in targets:
                _check_namespace(ns)
                removed += len(self._read(ns))
                path = self._get_namespace_path(ns)
                try:
                    path.unlink()
                except FileNotFoundError:
                    pass
                except OSError as e:
                    raise PathCacheError(f"Cannot delete {path}: {e}") from e
                self._loaded.pop(ns, None)
        return removed

    def get_stats(self) -> Dict[str, int]:
        """
        Get cache statistics.

        Returns:
            Dictionary mapping namespace to entry count
        """
        with self._lock:
            return {ns: len(self._read(ns)) for ns in NAMESPACES}
