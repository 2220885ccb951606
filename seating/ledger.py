"""
The seating ledger: typed commands and selectors over a ``Snapshot``.

Every command builds an ordered list of intents, hands it to the store as one
unit of work and, once the store has accepted it, applies the same intents to
the in-memory snapshot. A command that fails validation writes nothing.
"""

import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from seating import capacity
from seating.errors import NotFound, ValidationError
from seating.groups import AssignOutcome, AssignScope, get_group, guest_group_size, resolve_assignment
from seating.intents import (
    AddBlock,
    AddDeparture,
    DeleteAssignment,
    DeleteGuest,
    DeleteGuestAssignments,
    DeleteTable,
    Intent,
    RemoveBlock,
    RemoveDeparture,
    SetArrival,
    SetMemberArrival,
    UpdateGuest,
    UpsertAssignment,
)
from seating.keys import DAYS, MemberArrivalKey, TableSlotKey
from seating.snapshot import AssignmentRecord, Snapshot
from seating.sync import SnapshotDiff, diff_snapshots, merge_snapshot

logger = logging.getLogger(__name__)


class SeatingLedger:
    def __init__(self, store, snapshot: Optional[Snapshot] = None):
        self.store = store
        self.snapshot = snapshot if snapshot is not None else Snapshot()
        self._pending: List[Intent] = []

    @classmethod
    def load(cls, store) -> "SeatingLedger":
        return cls(store, store.load())

    # -------- sync --------

    def refresh(self) -> SnapshotDiff:
        """
        Fetches the stored state and merges it in.

        The poller calls this from a worker thread, so a refresh can land while
        a command is still waiting on the store. Intents of such a command are
        replayed on top of the fetched state until the store has accepted them.
        """
        fetched = self.store.load()
        merged = merge_snapshot(self.snapshot, fetched, list(self._pending))
        diff = diff_snapshots(self.snapshot, merged)
        self.snapshot = merged
        return diff

    def _commit(self, intents: Iterable[Intent]) -> List[dict]:
        intents = list(intents)
        if not intents:
            return []
        self._pending.extend(intents)
        try:
            applied = self.store.commit(intents)
        finally:
            for intent in intents:
                self._pending.remove(intent)
        for intent in intents:
            intent.apply(self.snapshot)
        return applied

    # -------- checks --------

    def _check_slot(self, day: str, service_id: int):
        if day not in DAYS:
            raise ValidationError(f"Unknown day '{day}'")
        if service_id is None or service_id < 1:
            raise ValidationError("service_id must be a positive integer")

    def _check_guest(self, guest_id: int):
        if guest_id is None:
            raise ValidationError("Guest ID required")
        if guest_id not in self.snapshot.guests:
            raise NotFound("Guest not found")

    def _check_table(self, table_id: int):
        if table_id is None:
            raise ValidationError("Table ID required")
        if table_id not in self.snapshot.tables:
            raise NotFound("Table not found")

    # -------- selectors --------

    def occupancy(self, table_id: int, day: str, service_id: int) -> int:
        return capacity.occupancy(self.snapshot, table_id, day, service_id)

    def has_arrived(self, guest_id: int, day: str) -> bool:
        return self.snapshot.has_arrived(guest_id, day)

    def has_departed(self, guest_id: int, day: str, service_id: int) -> bool:
        return self.snapshot.has_departed(guest_id, day, service_id)

    def is_blocked(self, table_id: int, day: str, service_id: int) -> bool:
        return self.snapshot.is_blocked(table_id, day, service_id)

    def guest_rows(self, guest_id: int, day: str, service_id: int) -> List[AssignmentRecord]:
        return self.snapshot.rows_for_guest(guest_id, day, service_id)

    # -------- assignment primitives --------

    def assign(self, guest_id: int, table_id: int, day: str, service_id: int,
               seats: int = 1, party_size_override: Optional[int] = None) -> AssignmentRecord:
        """
        Upserts one assignment row. Other rows of the guest in the slot stay.

        No capacity check and no block check; those belong to the evaluator.
        """
        self._check_slot(day, service_id)
        self._check_guest(guest_id)
        self._check_table(table_id)
        if seats < 1:
            raise ValidationError("seats must be at least 1")
        intent = UpsertAssignment(guest_id, table_id, day, service_id, seats, party_size_override)
        self._commit([intent])
        return self.snapshot.assignments[intent.key]

    def unassign(self, guest_id: int, table_id: int, day: str, service_id: int):
        self._check_slot(day, service_id)
        self._commit([DeleteAssignment(guest_id, table_id, day, service_id)])

    def unassign_guest_everywhere(self, guest_id: int, day: str, service_id: int):
        self._check_slot(day, service_id)
        self._commit([DeleteGuestAssignments(guest_id, day, service_id)])

    def move(self, guest_id: int, from_table_id: int, to_table_id: int, day: str, service_id: int) -> AssignmentRecord:
        """
        Moves a guest to another table with one seat.

        The target row is written before the old rows are removed, inside the
        same unit of work, so a failure never leaves the guest unseated.
        """
        self._check_slot(day, service_id)
        self._check_guest(guest_id)
        self._check_table(to_table_id)
        intents: List[Intent] = [UpsertAssignment(guest_id, to_table_id, day, service_id, 1)]
        stale = {from_table_id} | {row.table_id for row in self.guest_rows(guest_id, day, service_id)}
        stale.discard(to_table_id)
        intents.extend(DeleteAssignment(guest_id, table_id, day, service_id) for table_id in sorted(stale))
        self._commit(intents)
        return self.snapshot.assignments[intents[0].key]

    def move_guests(self, guest_ids: Sequence[int], from_table_id: int, to_table_id: int,
                    day: str, service_id: int) -> List[int]:
        self._check_slot(day, service_id)
        self._check_table(to_table_id)
        if not guest_ids:
            raise ValidationError("At least one guest ID required")
        for guest_id in guest_ids:
            self._check_guest(guest_id)

        intents: List[Intent] = []
        for guest_id in dict.fromkeys(guest_ids):
            intents.append(UpsertAssignment(guest_id, to_table_id, day, service_id, 1))
            if from_table_id != to_table_id:
                intents.append(DeleteAssignment(guest_id, from_table_id, day, service_id))
        self._commit(intents)
        return list(dict.fromkeys(guest_ids))

    def _place(self, guest_ids: Iterable[int], table_id: int, day: str, service_id: int) -> List[Intent]:
        guest_ids = list(guest_ids)
        intents: List[Intent] = [DeleteGuestAssignments(g, day, service_id) for g in guest_ids]
        intents.extend(UpsertAssignment(g, table_id, day, service_id, 1) for g in guest_ids)
        return intents

    def move_group(self, lead_guest_id: int, group_id: int, to_table_id: int,
                   day: str, service_id: int) -> List[int]:
        self._check_slot(day, service_id)
        self._check_table(to_table_id)
        group = get_group(self.snapshot, group_id)
        if group.lead_guest_id != lead_guest_id:
            raise ValidationError("Guest is not the lead of this group")

        guest_ids = list(group.all_guest_ids)
        self._commit(self._place(guest_ids, to_table_id, day, service_id))
        logger.info("Moved group %s (%d guests) to table %s for %s/%s",
                    group_id, len(guest_ids), to_table_id, day, service_id)
        return guest_ids

    def split(self, guest_id: int, day: str, service_id: int,
              allocations: Iterable[Tuple[int, int]]) -> List[AssignmentRecord]:
        """
        Spreads a guest's party over several tables.

        ``allocations`` is a list of ``(table_id, seats)``. The seats must add
        up to the guest's group size, otherwise nothing is written.
        """
        self._check_slot(day, service_id)
        self._check_guest(guest_id)
        allocations = [(int(table_id), int(seats)) for table_id, seats in allocations]

        seen = set()
        for table_id, seats in allocations:
            if seats < 0:
                raise ValidationError("Seat counts cannot be negative")
            if table_id in seen:
                raise ValidationError(f"Table {table_id} appears more than once")
            seen.add(table_id)
            self._check_table(table_id)

        total = sum(seats for _, seats in allocations)
        size = guest_group_size(self.snapshot, guest_id)
        if total != size:
            raise ValidationError(f"Allocated seats ({total}) must equal the group size ({size})")

        intents: List[Intent] = [DeleteGuestAssignments(guest_id, day, service_id)]
        intents.extend(
            UpsertAssignment(guest_id, table_id, day, service_id, seats)
            for table_id, seats in allocations
            if seats > 0
        )
        self._commit(intents)
        return self.guest_rows(guest_id, day, service_id)

    def split_by_member(self, group_id: int, day: str, service_id: int,
                        member_tables: Mapping[int, Optional[int]]) -> List[int]:
        self._check_slot(day, service_id)
        group = get_group(self.snapshot, group_id)

        member_tables = {int(k): v for k, v in member_tables.items()}
        expected = set(group.all_guest_ids)
        unknown = set(member_tables) - expected
        if unknown:
            raise ValidationError(f"Guests {sorted(unknown)} are not part of this group")
        missing = sorted(g for g in expected if member_tables.get(g) is None)
        if missing:
            raise ValidationError(f"Every group member needs a table, missing: {missing}")
        for table_id in set(member_tables.values()):
            self._check_table(table_id)

        intents: List[Intent] = [DeleteGuestAssignments(g, day, service_id) for g in group.all_guest_ids]
        intents.extend(
            UpsertAssignment(g, member_tables[g], day, service_id, 1) for g in group.all_guest_ids
        )
        self._commit(intents)
        return sorted(set(member_tables.values()))

    def assign_guest(self, guest_id: int, table_id: int, day: str, service_id: int,
                     group_id: Optional[int] = None, scope: Optional[AssignScope] = None,
                     cascade: bool = False) -> AssignOutcome:
        """
        Group-aware placement of a guest at a table.

        Leads take their group along, members ask first. Everybody placed loses
        any other seat they held in the slot. Returns the resolver outcome;
        when it asks for a choice nothing was written.
        """
        self._check_slot(day, service_id)
        self._check_table(table_id)
        outcome = resolve_assignment(self.snapshot, guest_id, group_id=group_id, scope=scope, cascade=cascade)
        if outcome.needs_choice:
            return outcome
        self._commit(self._place(outcome.guest_ids, table_id, day, service_id))
        return outcome

    # -------- arrivals, departures, blocks --------

    def toggle_arrival(self, guest_id: int, day: str) -> bool:
        if day not in DAYS:
            raise ValidationError(f"Unknown day '{day}'")
        self._check_guest(guest_id)
        arrived = not self.has_arrived(guest_id, day)
        self._commit([SetArrival(guest_id, day, arrived)])
        return arrived

    def toggle_departure(self, guest_id: int, day: str, service_id: int) -> bool:
        # Departing before arriving is allowed.
        self._check_slot(day, service_id)
        self._check_guest(guest_id)
        if self.has_departed(guest_id, day, service_id):
            self._commit([RemoveDeparture(guest_id, day, service_id)])
            return False
        self._commit([AddDeparture(guest_id, day, service_id)])
        return True

    def toggle_block(self, table_id: int, day: str, service_id: int) -> bool:
        self._check_slot(day, service_id)
        self._check_table(table_id)
        if self.is_blocked(table_id, day, service_id):
            self._commit([RemoveBlock(table_id, day, service_id)])
            return False
        self._commit([AddBlock(table_id, day, service_id)])
        return True

    def toggle_member_arrival(self, member_id: int, day: str) -> bool:
        if day not in DAYS:
            raise ValidationError(f"Unknown day '{day}'")
        arrived = MemberArrivalKey(member_id, day) not in self.snapshot.member_arrivals
        self._commit([SetMemberArrival(member_id, day, arrived)])
        return arrived

    # -------- guests and tables --------

    def toggle_ghost(self, guest_id: int) -> bool:
        self._check_guest(guest_id)
        is_ghost = not self.snapshot.guests[guest_id].is_ghost
        self._commit([UpdateGuest(guest_id, is_ghost=is_ghost)])
        return is_ghost

    def delete_guest(self, guest_id: int):
        self._check_guest(guest_id)
        self._commit([DeleteGuest(guest_id)])

    def delete_table(self, table_id: int):
        self._check_table(table_id)
        self._commit([DeleteTable(table_id)])

    # -------- borrowed chairs --------

    def borrow_chairs(self, target_table_id: int, sources: Mapping[int, int],
                      day: str, service_id: int) -> dict:
        """
        Moves chairs from ``sources`` ({table_id: chairs}) to the target table.

        Borrowed chairs only change this ledger's view of capacity; they are
        never written to the store.
        """
        self._check_slot(day, service_id)
        self._check_table(target_table_id)
        if self.is_blocked(target_table_id, day, service_id):
            raise ValidationError("Cannot borrow chairs for a blocked table")
        if not sources:
            raise ValidationError("At least one source table required")
        for table_id, chairs in sources.items():
            self._check_table(table_id)
            if table_id == target_table_id:
                raise ValidationError("A table cannot lend chairs to itself")
            if chairs < 1:
                raise ValidationError("Borrow at least one chair per source table")
            # Only free chairs can be lent.
            free = capacity.remaining_capacity(self.snapshot, table_id, day, service_id)
            if chairs > free:
                raise ValidationError(f"Table {table_id} has only {max(free, 0)} free chairs to lend")

        adjustments = self.snapshot.chair_adjustments
        target_key = TableSlotKey(day, service_id, target_table_id)
        adjustments[target_key] = adjustments.get(target_key, 0) + sum(sources.values())
        for table_id, chairs in sources.items():
            key = TableSlotKey(day, service_id, table_id)
            adjustments[key] = adjustments.get(key, 0) - chairs

        touched = [target_table_id, *sources]
        return {
            table_id: capacity.effective_capacity(self.snapshot, table_id, day, service_id)
            for table_id in touched
        }

    def reset_chairs(self, day: str, service_id: int):
        self.snapshot.chair_adjustments = {
            key: delta
            for key, delta in self.snapshot.chair_adjustments.items()
            if (key.day, key.service_id) != (day, service_id)
        }
