"""
NoteDeck Backend — View Cache
==============================

What:  In-process cache of rendered views, keyed by view path.
Why:   Listing notes is the hot read; mutations are rare. Serving the last
       rendered listing from memory spares the store a round trip, as long as
       every mutation revalidates the path it affects.
How:   A dict of path → (stored_at, value). Entries expire after `ttl`
       seconds; `revalidate_path()` drops a path and everything nested under it.

Paths name views, not endpoints: the notes listing is cached under "/notes"
no matter which route renders it.

Generations:
    A render that started before a revalidation must not land in the cache
    after it. Every path carries a revalidation counter; a reader takes
    `generation(path)` BEFORE querying the store and passes it to `set()`.
    If a revalidation happened in between, `set()` discards the value.

        reader: generation() → g0 ─ SELECT ────────────── set(g0) ✗ discarded
        writer:                      INSERT → COMMIT → revalidate (g0 → g1)

    Why a counter (not a lock): readers never wait on writers, and a write
    costs one integer increment.

Process scope:
    Each worker process keeps its own cache and only its own mutations
    revalidate it. With several workers, another worker can serve a stale
    listing for up to `ttl` seconds. That is why caching is off by default
    (VIEW_CACHE_TTL=0) and should only be enabled for single-worker setups.
"""

import logging
import time
from collections import defaultdict
from typing import Any, Dict, Optional, Tuple

from notedeck.config import settings

logger = logging.getLogger(__name__)

Generation = Tuple[int, ...]


class ViewCache:
    """
    Path-keyed cache with time-based expiry and explicit revalidation.

    A ttl of 0 disables the cache: `set()` stores nothing and `get()` always
    misses.
    """

    def __init__(self, ttl: int = 0):
        self.ttl = ttl
        self._entries: Dict[str, Tuple[float, Any]] = {}
        # What: path → number of times that exact path was revalidated
        # Why defaultdict: unseen paths start at generation 0
        self._revalidations: Dict[str, int] = defaultdict(int)

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    @staticmethod
    def _normalize(path: str) -> str:
        path = "/" + path.strip("/")
        return path

    @staticmethod
    def _ancestors(key: str) -> Tuple[str, ...]:
        """'/notes/archive' → ('/', '/notes', '/notes/archive')"""
        parts = [p for p in key.split("/") if p]
        return ("/",) + tuple("/" + "/".join(parts[: i + 1]) for i in range(len(parts)))

    def generation(self, path: str) -> Generation:
        """
        Current generation of `path`.

        Why include ancestors: revalidating "/notes" also invalidates
        "/notes/archive", so a render of the nested view must notice it.
        """
        key = self._normalize(path)
        return tuple(self._revalidations.get(a, 0) for a in self._ancestors(key))

    def get(self, path: str) -> Optional[Any]:
        """Return the cached value for `path`, or None on miss/expiry."""
        key = self._normalize(path)
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, value = entry
        if time.monotonic() - stored_at >= self.ttl:
            del self._entries[key]
            logger.debug("View cache expired: %s", key)
            return None
        return value

    def set(self, path: str, value: Any, generation: Optional[Generation] = None) -> bool:
        """
        Store `value` for `path`.

        Args:
            generation: What `generation(path)` returned before the value was
                        rendered. When the path was revalidated since, the
                        value is stale and is not stored.

        Returns:
            True if the value was stored.
        """
        if not self.enabled:
            return False

        key = self._normalize(path)
        if generation is not None and generation != self.generation(key):
            logger.debug("Discarding render of %s started before a revalidation", key)
            return False

        self._entries[key] = (time.monotonic(), value)
        return True

    def revalidate_path(self, path: str) -> int:
        """
        Mark the view at `path` (and any nested view) stale.

        Bumps the path's generation even when nothing is cached, so renders
        still in flight are discarded too.

        Returns:
            Number of entries dropped.
        """
        key = self._normalize(path)
        self._revalidations[key] += 1

        prefix = key.rstrip("/") + "/"
        stale = [p for p in self._entries if p == key or p.startswith(prefix)]
        for p in stale:
            del self._entries[p]

        logger.debug("Revalidated %s (%d cached views dropped)", key, len(stale))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        self._revalidations.clear()

    def __len__(self) -> int:
        return len(self._entries)


# Shared by every request in this process
view_cache = ViewCache(ttl=settings.view_cache_ttl)
