"""View revalidation signals.

When a write changes what a view shows (e.g. a new bank link changes the
dashboard), the writer calls :meth:`ViewRevalidator.revalidate_path`.
Views expose the path's version as an ETag so clients know to refetch.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class ViewRevalidator:
    """Per-path version counters."""

    def __init__(self) -> None:
        self._versions: dict[str, int] = {}
        self._lock = threading.Lock()

    def revalidate_path(self, path: str) -> int:
        """Mark ``path`` stale and return its new version."""
        with self._lock:
            version = self._versions.get(path, 0) + 1
            self._versions[path] = version
        logger.debug("Revalidated %s (version %d)", path, version)
        return version

    def version(self, path: str) -> int:
        with self._lock:
            return self._versions.get(path, 0)


view_revalidator = ViewRevalidator()
