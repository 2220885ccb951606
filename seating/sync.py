"""
Polling reconciliation.

A fetched snapshot is merged into the local one instead of replacing it: the
stored state wins, intents still in flight are replayed on top, and borrowed
chairs (which only exist locally) are carried over.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Set

from seating.errors import SeatingError
from seating.snapshot import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_POLL_SECONDS = float(os.getenv("SNAPSHOT_POLL_SECONDS", "5"))


@dataclass
class SnapshotDiff:
    added_guests: Set[int] = field(default_factory=set)
    removed_guests: Set[int] = field(default_factory=set)
    changed_guests: Set[int] = field(default_factory=set)
    added_tables: Set[int] = field(default_factory=set)
    removed_tables: Set[int] = field(default_factory=set)
    changed_tables: Set[int] = field(default_factory=set)
    changed_groups: Set[int] = field(default_factory=set)
    added_assignments: Set = field(default_factory=set)
    removed_assignments: Set = field(default_factory=set)
    changed_assignments: Set = field(default_factory=set)
    changed_arrivals: Set = field(default_factory=set)
    changed_departures: Set = field(default_factory=set)
    changed_blocks: Set = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in self.__dataclass_fields__)

    def summary(self) -> dict:
        return {name: len(getattr(self, name)) for name in self.__dataclass_fields__}


def _diff_maps(old: dict, new: dict):
    added = set(new) - set(old)
    removed = set(old) - set(new)
    changed = {k for k in set(old) & set(new) if old[k] != new[k]}
    return added, removed, changed


def diff_snapshots(old: Snapshot, new: Snapshot) -> SnapshotDiff:
    diff = SnapshotDiff()
    diff.added_guests, diff.removed_guests, diff.changed_guests = _diff_maps(old.guests, new.guests)
    diff.added_tables, diff.removed_tables, diff.changed_tables = _diff_maps(old.tables, new.tables)
    added, removed, changed = _diff_maps(old.groups, new.groups)
    diff.changed_groups = added | removed | changed
    diff.added_assignments, diff.removed_assignments, diff.changed_assignments = _diff_maps(
        old.assignments, new.assignments
    )
    diff.changed_arrivals = old.arrivals ^ new.arrivals
    diff.changed_departures = old.departures ^ new.departures
    diff.changed_blocks = old.blocked_tables ^ new.blocked_tables
    return diff


def merge_snapshot(local: Snapshot, fetched: Snapshot, pending: Iterable = ()) -> Snapshot:
    merged = fetched.copy()
    merged.chair_adjustments = {
        key: delta for key, delta in local.chair_adjustments.items() if key.table_id in merged.tables
    }
    for intent in pending:
        intent.apply(merged)
    return merged


class SnapshotPoller:
    """
    Re-fetches the ledger's snapshot on a fixed interval until stopped.

    Each refresh runs in a worker thread so a slow store never blocks the
    event loop. ``on_change`` is therefore called from that thread, and
    ``stop`` may be called from any thread.
    """

    def __init__(self, ledger, interval: float = DEFAULT_POLL_SECONDS,
                 on_change: Optional[Callable[[SnapshotDiff], None]] = None):
        self.ledger = ledger
        self.interval = interval
        self.on_change = on_change
        self._loop = None
        self._stopped = None
        self._stop_requested = False

    def poll_once(self) -> Optional[SnapshotDiff]:
        try:
            diff = self.ledger.refresh()
        except SeatingError as e:
            # The next tick retries.
            logger.warning("Snapshot refresh failed: %s", e.detail)
            return None
        if not diff.is_empty:
            logger.info("Snapshot changed: %s", {k: v for k, v in diff.summary().items() if v})
            if self.on_change is not None:
                self.on_change(diff)
        return diff

    async def run(self):
        # The event must belong to the loop that runs the poller.
        self._loop = asyncio.get_running_loop()
        self._stopped = asyncio.Event()
        self._stop_requested = False
        try:
            while not self._stop_requested:
                await asyncio.to_thread(self.poll_once)
                if self._stop_requested:
                    break
                try:
                    await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._loop = None
            self._stopped = None

    def stop(self):
        self._stop_requested = True
        if self._loop is not None and self._stopped is not None:
            self._loop.call_soon_threadsafe(self._stopped.set)
