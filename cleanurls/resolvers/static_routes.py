"""
Checks against the host platform's real files and directories.

A clean path that is also a real file or directory on the host would be
served by the web server before it ever reaches the router, so such paths
must never be produced by the cleaner nor rewritten by the uncleaner.
"""

from pathlib import Path
from typing import Optional, Union


class FilesystemStaticRoutes:
    """Static routes backed by the platform's code directory."""

    def __init__(self, dirroot: Optional[Union[str, Path]] = None):
        self.dirroot = Path(dirroot) if dirroot else None

    def exists(self, relative_path: str) -> bool:
        """
        Check whether a site-relative path names an existing file or directory.

        Args:
            relative_path: Path below the site root, with or without leading slash

        Returns:
            True if the path exists; always False without a dirroot
        """
        if self.dirroot is None:
            return False
        relative_path = relative_path.strip('/')
        if not relative_path or '..' in relative_path.split('/'):
            return False
        return (self.dirroot / relative_path).exists()

    def collides(self, relative_path: str) -> bool:
        """True if the path, or the same path as a PHP script, exists."""
        return self.exists(relative_path) or self.exists(relative_path.rstrip('/') + '.php')
