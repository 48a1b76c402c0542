"""Process-wide holder for the latest published snapshot.

Lifecycle: created empty at startup, replaced by the refresher after
every successful cycle, read by the ``/metrics`` handler.  There is one
writer and any number of readers.  Snapshots are immutable, so readers
only need the current reference; the lock serialises writers and the
swap itself.
"""

from __future__ import annotations

import logging
import threading

from ovms_exporter.snapshot import Snapshot

_logger = logging.getLogger(__name__)


class SnapshotCache:
    """Holds at most one :class:`Snapshot` (EMPTY or READY)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: Snapshot = Snapshot.empty()
        self._ready = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    def publish(self, snapshot: Snapshot) -> bool:
        """Replace the current snapshot.

        Empty snapshots are refused so a failed cycle keeps serving the
        last good one.  Returns ``True`` when the snapshot was published.
        """
        if snapshot.is_empty:
            _logger.info("Keeping previous snapshot; refresh produced no samples")
            return False
        with self._lock:
            self._snapshot = snapshot
            self._ready = True
        _logger.info(
            "Published snapshot: %d sample(s), %d metric(s)",
            snapshot.sample_count,
            snapshot.metric_count,
        )
        return True

    def current(self) -> Snapshot:
        return self._snapshot

    def text(self) -> str:
        return self._snapshot.text
