"""Dependency cache preservation across clean checkouts.

The checkout directory is deleted and re-cloned on every deployment. The
dependency cache inside it (``node_modules`` by default) is parked next to
the checkout for the duration of the clone and moved back afterwards, so the
install step only has to resolve what changed in the manifest.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from pushdeploy.layout import DeployLayout

logger = logging.getLogger(__name__)


class PreservedCache:
    def __init__(self, layout: DeployLayout, now: datetime | None = None) -> None:
        self.layout = layout
        self.parking_path = layout.cache_parking_path(now)
        self.parked = False

    def acquire(self) -> bool:
        """Park the cache (if any) and clear the checkout directory.

        Returns True when a cache was parked.
        """
        if self.layout.cache.is_dir():
            base = self.parking_path
            suffix = 1
            while self.parking_path.exists():
                self.parking_path = base.with_name(f"{base.name}.{suffix}")
                suffix += 1
            shutil.move(str(self.layout.cache), str(self.parking_path))
            self.parked = True
            logger.info("parked dependency cache at %s", self.parking_path)
        if self.layout.checkout.exists():
            shutil.rmtree(self.layout.checkout)
        return self.parked

    def restore(self) -> bool:
        """Move a parked cache back into the checkout. Returns True if one was moved."""
        if not self.parked:
            return False
        self.layout.checkout.mkdir(parents=True, exist_ok=True)
        if self.layout.cache.exists():
            # The repository ships its own copy; the parked cache wins.
            shutil.rmtree(self.layout.cache)
        self.layout.cache.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(self.parking_path), str(self.layout.cache))
        self.parked = False
        logger.info("restored dependency cache into %s", self.layout.cache)
        return True

    def release(self) -> None:
        if self.parked:
            logger.warning("restoring parked dependency cache after an interrupted checkout")
            self.restore()


@contextmanager
def preserved_cache(layout: DeployLayout, now: datetime | None = None) -> Iterator[PreservedCache]:
    cache = PreservedCache(layout, now)
    try:
        cache.acquire()
        yield cache
    finally:
        cache.release()
