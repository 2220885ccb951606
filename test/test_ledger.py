import pytest

from seating import capacity, reports
from seating.errors import NotFound, StorageFailure, ValidationError
from seating.groups import (
    AssignScope,
    AssignStatus,
    group_assignment_status,
    guest_group_size,
    table_guests_grouped,
    unassigned_guest_ids,
)
from seating.keys import ArrivalKey
from seating.ledger import SeatingLedger
from seating.snapshot import GroupRecord, GuestRecord, Snapshot, TableRecord
from seating.store import MemorySeatingStore

# ---------------------------------------------------------
# Helper: Ledger über einem In-Memory-Store
# ---------------------------------------------------------
def create_test_ledger(tables=None, guests=None, groups=None):
    """
    tables: {table_id: capacity}, guests: list of ids or {id: is_ghost},
    groups: {group_id: (lead_id, [member_ids])}
    """
    snapshot = Snapshot()
    for table_id, seats in (tables or {}).items():
        snapshot.tables[table_id] = TableRecord(id=table_id, name=f"Table {table_id}", capacity=seats)
    if isinstance(guests, dict):
        items = guests.items()
    else:
        items = ((guest_id, False) for guest_id in (guests or []))
    for guest_id, is_ghost in items:
        snapshot.guests[guest_id] = GuestRecord(id=guest_id, name=f"Guest {guest_id}", is_ghost=is_ghost)
    for group_id, (lead_id, member_ids) in (groups or {}).items():
        snapshot.groups[group_id] = GroupRecord(id=group_id, lead_guest_id=lead_id, member_ids=tuple(member_ids))
    store = MemorySeatingStore(snapshot)
    return SeatingLedger.load(store)

def tables_of(ledger, guest_id, day="mon", service_id=1):
    return sorted(row.table_id for row in ledger.guest_rows(guest_id, day, service_id))

class FailingStore(MemorySeatingStore):
    def commit(self, intents):
        raise StorageFailure("database is gone")

# =========================================================
# TEST: assign / unassign
# =========================================================
def test_assign_upserts_on_natural_key():
    ledger = create_test_ledger(tables={1: 6}, guests=[1])

    ledger.assign(1, 1, "mon", 1)
    row = ledger.assign(1, 1, "mon", 1, seats=3, party_size_override=4)

    assert row.seats == 3
    assert row.party_size_override == 4
    assert len(ledger.snapshot.assignments) == 1
    assert ledger.occupancy(1, "mon", 1) == 3

def test_assign_keeps_other_tables():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1])

    ledger.assign(1, 1, "mon", 1)
    ledger.assign(1, 2, "mon", 1)

    assert tables_of(ledger, 1) == [1, 2]

def test_assign_does_not_check_capacity_or_blocks():
    ledger = create_test_ledger(tables={1: 1}, guests=[1, 2])
    ledger.toggle_block(1, "mon", 1)

    ledger.assign(1, 1, "mon", 1)
    ledger.assign(2, 1, "mon", 1)

    assert ledger.occupancy(1, "mon", 1) == 2

def test_assign_unknown_guest_or_table():
    ledger = create_test_ledger(tables={1: 6}, guests=[1])

    with pytest.raises(NotFound):
        ledger.assign(99, 1, "mon", 1)
    with pytest.raises(NotFound):
        ledger.assign(1, 99, "mon", 1)
    with pytest.raises(ValidationError):
        ledger.assign(1, 1, "someday", 1)
    assert ledger.snapshot.assignments == {}

def test_unassign_missing_is_noop():
    ledger = create_test_ledger(tables={1: 6}, guests=[1])

    ledger.unassign(1, 1, "mon", 1)

    assert ledger.snapshot.assignments == {}

def test_changes_reach_the_store():
    ledger = create_test_ledger(tables={1: 6}, guests=[1])
    ledger.assign(1, 1, "mon", 1)

    reloaded = SeatingLedger.load(ledger.store)

    assert tables_of(reloaded, 1) == [1]

def test_failed_commit_leaves_snapshot_untouched():
    ledger = create_test_ledger(tables={1: 6}, guests=[1])
    ledger.store = FailingStore(ledger.snapshot.copy())

    with pytest.raises(StorageFailure):
        ledger.assign(1, 1, "mon", 1)

    assert ledger.snapshot.assignments == {}

# =========================================================
# TEST: move
# =========================================================
def test_move_leaves_guest_only_at_target():
    ledger = create_test_ledger(tables={1: 6, 2: 6, 3: 6}, guests=[1])
    ledger.assign(1, 1, "mon", 1)
    ledger.assign(1, 1, "tue", 1)

    ledger.move(1, 1, 2, "mon", 1)

    assert tables_of(ledger, 1) == [2]
    assert tables_of(ledger, 1, "tue") == [1]

def test_move_same_table_keeps_guest():
    ledger = create_test_ledger(tables={1: 6}, guests=[1])
    ledger.assign(1, 1, "mon", 1)

    ledger.move(1, 1, 1, "mon", 1)

    assert tables_of(ledger, 1) == [1]

def test_move_resets_seats_to_one():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1])
    ledger.assign(1, 1, "mon", 1, seats=3)

    row = ledger.move(1, 1, 2, "mon", 1)

    assert row.seats == 1
    assert ledger.occupancy(1, "mon", 1) == 0

def test_move_guests_moves_selection():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1, 2, 3])
    for guest_id in (1, 2, 3):
        ledger.assign(guest_id, 1, "mon", 1)

    ledger.move_guests([1, 2], 1, 2, "mon", 1)

    assert tables_of(ledger, 1) == [2]
    assert tables_of(ledger, 2) == [2]
    assert tables_of(ledger, 3) == [1]

def test_move_guests_requires_guests():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1])

    with pytest.raises(ValidationError):
        ledger.move_guests([], 1, 2, "mon", 1)

# =========================================================
# TEST: assign_guest (group aware)
# =========================================================
def test_plain_assignment_replaces_previous_table():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1])

    ledger.assign_guest(1, 1, "mon", 1)
    ledger.assign_guest(1, 2, "mon", 1)

    assert tables_of(ledger, 1) == [2]

def test_lead_cascades_to_group():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1, 2, 3], groups={10: (1, [2, 3])})
    ledger.assign(3, 2, "mon", 1)

    outcome = ledger.assign_guest(1, 1, "mon", 1)

    assert outcome.status == AssignStatus.ASSIGNED
    assert outcome.group_id == 10
    assert [tables_of(ledger, g) for g in (1, 2, 3)] == [[1], [1], [1]]

def test_lead_of_several_groups_must_choose():
    ledger = create_test_ledger(tables={1: 6}, guests=[1, 2, 3], groups={10: (1, [2]), 11: (1, [3])})

    outcome = ledger.assign_guest(1, 1, "mon", 1)

    assert outcome.status == AssignStatus.NEEDS_GROUP_CHOICE
    assert outcome.candidate_group_ids == (10, 11)
    assert ledger.snapshot.assignments == {}

    outcome = ledger.assign_guest(1, 1, "mon", 1, group_id=11)
    assert outcome.status == AssignStatus.ASSIGNED
    assert tables_of(ledger, 3) == [1]
    assert tables_of(ledger, 2) == []

def test_member_must_choose_scope():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1, 2, 3], groups={10: (1, [2, 3])})

    outcome = ledger.assign_guest(2, 1, "mon", 1)

    assert outcome.status == AssignStatus.NEEDS_MEMBER_CHOICE
    assert outcome.group_id == 10
    assert outcome.lead_guest_id == 1
    assert ledger.snapshot.assignments == {}

def test_member_scope_member_moves_only_member():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1, 2, 3], groups={10: (1, [2, 3])})
    ledger.assign_guest(1, 1, "mon", 1)

    ledger.assign_guest(2, 2, "mon", 1, scope=AssignScope.MEMBER)

    assert tables_of(ledger, 1) == [1]
    assert tables_of(ledger, 2) == [2]
    assert tables_of(ledger, 3) == [1]

def test_member_scope_group_moves_group():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1, 2, 3], groups={10: (1, [2, 3])})

    ledger.assign_guest(3, 2, "mon", 1, scope="group")

    assert [tables_of(ledger, g) for g in (1, 2, 3)] == [[2], [2], [2]]

def test_cascade_flag_places_single_guest():
    ledger = create_test_ledger(tables={1: 6}, guests=[1, 2], groups={10: (1, [2])})

    ledger.assign_guest(1, 1, "mon", 1, cascade=True)

    assert tables_of(ledger, 1) == [1]
    assert tables_of(ledger, 2) == []

# =========================================================
# TEST: move_group
# =========================================================
def test_move_group_only_touches_slot():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1, 2, 3], groups={10: (1, [2, 3])})
    for day, service_id in (("tue", 2), ("tue", 1), ("wed", 2)):
        ledger.assign_guest(1, 1, day, service_id)

    ledger.move_group(1, 10, 2, "tue", 2)

    at_a = [row.guest_id for row in ledger.snapshot.rows_at_table(1, "tue", 2)]
    at_b = sorted(row.guest_id for row in ledger.snapshot.rows_at_table(2, "tue", 2))
    assert at_a == []
    assert at_b == [1, 2, 3]
    assert ledger.occupancy(1, "tue", 1) == 3
    assert ledger.occupancy(1, "wed", 2) == 3

def test_move_group_rejects_wrong_lead():
    ledger = create_test_ledger(tables={1: 6}, guests=[1, 2], groups={10: (1, [2])})

    with pytest.raises(ValidationError):
        ledger.move_group(2, 10, 1, "mon", 1)
    with pytest.raises(NotFound):
        ledger.move_group(1, 99, 1, "mon", 1)

def test_move_group_is_all_or_nothing():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1, 2, 3], groups={10: (1, [2, 3])})
    ledger.assign_guest(1, 1, "mon", 1)
    ledger.store = FailingStore(ledger.snapshot.copy())

    with pytest.raises(StorageFailure):
        ledger.move_group(1, 10, 2, "mon", 1)

    assert [tables_of(ledger, g) for g in (1, 2, 3)] == [[1], [1], [1]]

# =========================================================
# TEST: split
# =========================================================
def test_split_spreads_party():
    ledger = create_test_ledger(
        tables={1: 4, 2: 4},
        guests=[1, 2, 3, 4, 5],
        groups={10: (1, [2, 3, 4, 5])},
    )
    ledger.assign(1, 1, "mon", 1)

    rows = ledger.split(1, "mon", 1, [(1, 3), (2, 2)])

    assert {(row.table_id, row.seats) for row in rows} == {(1, 3), (2, 2)}
    assert ledger.occupancy(1, "mon", 1) == 3
    assert ledger.occupancy(2, "mon", 1) == 2

def test_split_skips_zero_allocations():
    ledger = create_test_ledger(tables={1: 4, 2: 4}, guests=[1, 2], groups={10: (1, [2])})

    ledger.split(1, "mon", 1, [(1, 2), (2, 0)])

    assert tables_of(ledger, 1) == [1]

def test_split_with_wrong_total_changes_nothing():
    ledger = create_test_ledger(tables={1: 4, 2: 4}, guests=[1, 2, 3], groups={10: (1, [2, 3])})
    ledger.assign(1, 1, "mon", 1)
    before = ledger.store.load().assignments

    with pytest.raises(ValidationError):
        ledger.split(1, "mon", 1, [(1, 1), (2, 1)])

    assert ledger.store.load().assignments == before
    assert ledger.snapshot.assignments == before

def test_split_rejects_bad_allocations():
    ledger = create_test_ledger(tables={1: 4, 2: 4}, guests=[1, 2], groups={10: (1, [2])})

    with pytest.raises(ValidationError):
        ledger.split(1, "mon", 1, [(1, 1), (1, 1)])
    with pytest.raises(ValidationError):
        ledger.split(1, "mon", 1, [(1, 3), (2, -1)])
    with pytest.raises(NotFound):
        ledger.split(1, "mon", 1, [(1, 1), (99, 1)])

def test_split_by_member():
    ledger = create_test_ledger(tables={1: 2, 2: 2}, guests=[1, 2, 3], groups={10: (1, [2, 3])})
    ledger.assign_guest(1, 1, "mon", 1)

    table_ids = ledger.split_by_member(10, "mon", 1, {1: 1, 2: 1, 3: 2})

    assert table_ids == [1, 2]
    assert [tables_of(ledger, g) for g in (1, 2, 3)] == [[1], [1], [2]]

def test_split_by_member_requires_every_member():
    ledger = create_test_ledger(tables={1: 2, 2: 2}, guests=[1, 2, 3], groups={10: (1, [2, 3])})

    with pytest.raises(ValidationError):
        ledger.split_by_member(10, "mon", 1, {1: 1, 2: 2})
    with pytest.raises(ValidationError):
        ledger.split_by_member(10, "mon", 1, {1: 1, 2: 2, 3: None})
    assert ledger.snapshot.assignments == {}

# =========================================================
# TEST: capacity and fit
# =========================================================
def test_capacity_scenario_over_capacity_is_flagged_not_refused():
    ledger = create_test_ledger(tables={1: 6}, guests=[1, 2, 3, 4, 5, 6, 7])

    for guest_id in (1, 2, 3, 4):
        ledger.assign(guest_id, 1, "mon", 1)
    assert ledger.occupancy(1, "mon", 1) == 4

    ledger.assign(5, 1, "mon", 1)
    assert ledger.occupancy(1, "mon", 1) == 5
    assert not capacity.is_over_capacity(ledger.snapshot, 1, "mon", 1)

    ledger.assign(6, 1, "mon", 1)
    assert not capacity.fits_table(ledger.snapshot, 7, 1, "mon", 1)

    ledger.assign(7, 1, "mon", 1)
    assert ledger.occupancy(1, "mon", 1) == 7
    assert capacity.is_over_capacity(ledger.snapshot, 1, "mon", 1)

def test_needs_split_when_group_exceeds_largest_table():
    ledger = create_test_ledger(tables={1: 4}, guests=[1, 2, 3, 4, 5], groups={10: (1, [2, 3, 4, 5])})

    assert guest_group_size(ledger.snapshot, 1) == 5
    assert capacity.largest_available_capacity(ledger.snapshot, "mon", 1) == 4
    assert capacity.needs_split(ledger.snapshot, 1, "mon", 1)
    assert not capacity.can_fit_in_single_table(ledger.snapshot, 1, "mon", 1)

def test_solo_guest_never_needs_split():
    ledger = create_test_ledger(tables={}, guests=[1])

    assert capacity.largest_available_capacity(ledger.snapshot, "mon", 1) == 0
    assert not capacity.needs_split(ledger.snapshot, 1, "mon", 1)

def test_assigned_guest_always_fits():
    ledger = create_test_ledger(tables={1: 1}, guests=[1, 2, 3], groups={10: (1, [2, 3])})
    ledger.assign(1, 1, "mon", 1)

    assert capacity.can_fit_in_single_table(ledger.snapshot, 1, "mon", 1)

def test_blocked_table_never_fits_but_low_level_assign_works():
    ledger = create_test_ledger(tables={1: 6}, guests=[1])
    ledger.toggle_block(1, "wed", 1)

    assert not capacity.fits_table(ledger.snapshot, 1, 1, "wed", 1)
    assert capacity.fits_table(ledger.snapshot, 1, 1, "wed", 2)
    assert capacity.largest_available_capacity(ledger.snapshot, "wed", 1) == 0

    ledger.assign(1, 1, "wed", 1)
    assert ledger.occupancy(1, "wed", 1) == 1

def test_borrow_chairs_moves_capacity():
    ledger = create_test_ledger(tables={1: 4, 2: 6, 3: 6}, guests=[1])

    result = ledger.borrow_chairs(1, {2: 2, 3: 1}, "mon", 1)

    assert result == {1: 7, 2: 4, 3: 5}
    assert capacity.effective_capacity(ledger.snapshot, 1, "mon", 2) == 4
    assert ledger.store.load().chair_adjustments == {}

    ledger.reset_chairs("mon", 1)
    assert capacity.effective_capacity(ledger.snapshot, 1, "mon", 1) == 4

def test_borrow_chairs_rejects_blocked_target():
    ledger = create_test_ledger(tables={1: 4, 2: 6}, guests=[1])
    ledger.toggle_block(1, "mon", 1)

    with pytest.raises(ValidationError):
        ledger.borrow_chairs(1, {2: 2}, "mon", 1)
    with pytest.raises(ValidationError):
        ledger.borrow_chairs(2, {2: 1}, "mon", 1)
    with pytest.raises(ValidationError):
        ledger.borrow_chairs(2, {1: 0}, "mon", 1)

def test_borrow_chairs_only_lends_free_chairs():
    ledger = create_test_ledger(tables={1: 2, 2: 4}, guests=[1, 2])
    ledger.assign(1, 1, "mon", 1)
    ledger.assign(2, 1, "mon", 1)

    # Tisch 1 ist voll besetzt
    with pytest.raises(ValidationError):
        ledger.borrow_chairs(2, {1: 2}, "mon", 1)
    assert ledger.snapshot.chair_adjustments == {}
    assert not capacity.is_over_capacity(ledger.snapshot, 1, "mon", 1)

    ledger.move(2, 1, 2, "mon", 1)
    assert ledger.borrow_chairs(2, {1: 1}, "mon", 1) == {2: 5, 1: 1}

# =========================================================
# TEST: arrivals, departures, blocks
# =========================================================
def test_toggle_arrival_twice_restores_state():
    ledger = create_test_ledger(guests=[1])

    assert ledger.toggle_arrival(1, "mon") is True
    assert ledger.has_arrived(1, "mon")
    assert ledger.toggle_arrival(1, "mon") is False
    assert not ledger.has_arrived(1, "mon")
    assert ledger.snapshot.arrivals == set()

def test_departure_without_arrival_is_allowed():
    ledger = create_test_ledger(guests=[1])

    assert ledger.toggle_departure(1, "mon", 2) is True
    assert ledger.has_departed(1, "mon", 2)
    assert not ledger.has_departed(1, "mon", 1)
    assert ledger.toggle_departure(1, "mon", 2) is False

def test_toggle_block():
    ledger = create_test_ledger(tables={1: 4})

    assert ledger.toggle_block(1, "fri", 3) is True
    assert ledger.is_blocked(1, "fri", 3)
    assert ledger.toggle_block(1, "fri", 3) is False
    assert not ledger.is_blocked(1, "fri", 3)

def test_toggle_member_arrival():
    ledger = create_test_ledger()

    assert ledger.toggle_member_arrival(5, "sat") is True
    assert ledger.toggle_member_arrival(5, "sat") is False

# =========================================================
# TEST: guests and tables
# =========================================================
def test_delete_guest_leaves_no_residue():
    ledger = create_test_ledger(
        tables={1: 6, 2: 6},
        guests=[1, 2, 3],
        groups={10: (1, [2]), 11: (3, [1])},
    )
    ledger.split(1, "mon", 1, [(1, 1), (2, 1)])
    ledger.toggle_arrival(1, "mon")
    ledger.toggle_departure(1, "mon", 1)

    ledger.delete_guest(1)

    for snapshot in (ledger.snapshot, ledger.store.load()):
        assert 1 not in snapshot.guests
        assert not [k for k in snapshot.assignments if k.guest_id == 1]
        assert ArrivalKey(1, "mon") not in snapshot.arrivals
        assert not [k for k in snapshot.departures if k.guest_id == 1]
        assert 10 not in snapshot.groups
        assert snapshot.groups[11].member_ids == ()

def test_delete_table_removes_assignments_and_blocks():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1])
    ledger.assign(1, 1, "mon", 1)
    ledger.toggle_block(1, "mon", 2)

    ledger.delete_table(1)

    assert ledger.snapshot.assignments == {}
    assert ledger.snapshot.blocked_tables == set()
    with pytest.raises(NotFound):
        ledger.delete_table(1)

def test_toggle_ghost_excludes_guest_from_headcount():
    ledger = create_test_ledger(tables={1: 6}, guests=[1, 2])
    ledger.assign(1, 1, "mon", 1)
    ledger.assign(2, 1, "mon", 1)

    assert ledger.toggle_ghost(2) is True

    summary = reports.attendance_summary(ledger.snapshot, "mon")
    assert summary["total_guests"] == 1
    assert ledger.occupancy(1, "mon", 1) == 2

# =========================================================
# TEST: group views
# =========================================================
def test_group_status_complete_and_split():
    ledger = create_test_ledger(tables={1: 6, 2: 6}, guests=[1, 2, 3], groups={10: (1, [2, 3])})
    ledger.assign_guest(1, 1, "mon", 1)

    status = group_assignment_status(ledger.snapshot, 10, "mon", 1)
    assert status.is_active_for_service
    assert status.is_complete
    assert not status.is_split
    assert status.table_ids == [1]

    ledger.move(3, 1, 2, "mon", 1)
    status = group_assignment_status(ledger.snapshot, 10, "mon", 1)
    assert status.is_split
    assert not status.is_complete
    assert status.table_ids == [1, 2]

def test_group_status_missing_members():
    ledger = create_test_ledger(tables={1: 6}, guests=[1, 2, 3], groups={10: (1, [2, 3])})
    ledger.assign(2, 1, "mon", 1)

    status = group_assignment_status(ledger.snapshot, 10, "mon", 1)

    assert status.assigned_count == 1
    assert status.total_count == 3
    assert status.missing_member_ids == [1, 3]

def test_unused_group_of_seated_lead_is_not_active():
    ledger = create_test_ledger(tables={1: 6}, guests=[1, 2, 3], groups={10: (1, [2]), 11: (1, [3])})
    ledger.assign_guest(1, 1, "mon", 1, group_id=10)

    assert group_assignment_status(ledger.snapshot, 10, "mon", 1).is_complete
    assert not group_assignment_status(ledger.snapshot, 11, "mon", 1).is_active_for_service

def test_memberless_group_is_active_when_lead_sits():
    ledger = create_test_ledger(tables={1: 6}, guests=[1], groups={10: (1, [])})
    ledger.assign(1, 1, "mon", 1)

    assert group_assignment_status(ledger.snapshot, 10, "mon", 1).is_complete

def test_table_guests_grouped_puts_ungrouped_first():
    ledger = create_test_ledger(tables={1: 6}, guests=[1, 2, 3, 4], groups={10: (1, [2])})
    ledger.assign_guest(1, 1, "mon", 1)
    ledger.assign_guest(4, 1, "mon", 1)

    buckets = table_guests_grouped(ledger.snapshot, 1, "mon", 1)

    assert buckets[0]["group_id"] is None
    assert [g["id"] for g in buckets[0]["guests"]] == [4]
    assert buckets[1]["group_id"] == 10
    assert buckets[1]["group_name"] == "Guest 1's group"
    assert [g["id"] for g in buckets[1]["guests"]] == [1, 2]

def test_unassigned_guests():
    ledger = create_test_ledger(tables={1: 6}, guests=[1, 2, 3])
    ledger.assign(2, 1, "mon", 1)

    assert unassigned_guest_ids(ledger.snapshot, "mon", 1) == [1, 3]
    assert unassigned_guest_ids(ledger.snapshot, "mon", 2) == [1, 2, 3]

# =========================================================
# TEST: reports
# =========================================================
def test_weekly_summary():
    ledger = create_test_ledger(tables={1: 6}, guests={1: False, 2: False, 3: True})
    ledger.assign(1, 1, "mon", 1)
    ledger.assign(2, 1, "mon", 2)
    ledger.assign(3, 1, "mon", 2)
    ledger.assign(1, 1, "tue", 2)
    ledger.toggle_arrival(1, "mon")

    summary = reports.weekly_summary(ledger.snapshot)

    assert summary["total_guests"] == 3
    assert summary["total_arrivals"] == 1
    assert summary["peak_day"] == "mon"
    assert summary["service_popularity"][0] == {"service_id": 2, "total": 2}
    monday = summary["days"][0]
    assert monday["total_guests"] == 2
    assert monday["arrival_rate"] == 50

def test_duplicate_guests_ignore_case_and_spaces():
    ledger = create_test_ledger(guests=[1, 2, 3, 4])
    snapshot = ledger.snapshot
    snapshot.guests[1] = GuestRecord(id=1, name="Anna Weber")
    snapshot.guests[2] = GuestRecord(id=2, name="  anna weber ")
    snapshot.guests[3] = GuestRecord(id=3, name="Anna Webers")

    assert reports.duplicate_guest_ids(snapshot) == [1, 2]

def test_party_arrival_counts_lead_and_named_members():
    ledger = create_test_ledger(guests=[1, 2])
    ledger.snapshot.group_members.update({20: 1, 21: 1, 22: 2})

    status = reports.party_arrival_status(ledger.snapshot, 1, "fri")
    assert (status["arrived"], status["total"], status["percentage"]) == (0, 3, 0)
    assert not status["is_partial"]

    ledger.toggle_arrival(1, "fri")
    ledger.toggle_member_arrival(21, "fri")
    ledger.toggle_member_arrival(22, "fri")
    status = reports.party_arrival_status(ledger.snapshot, 1, "fri")
    assert (status["arrived"], status["total"], status["percentage"]) == (2, 3, 67)
    assert status["is_partial"] and not status["is_complete"]

    ledger.toggle_member_arrival(20, "fri")
    assert reports.party_arrival_status(ledger.snapshot, 1, "fri")["is_complete"]
    assert reports.party_arrival_status(ledger.snapshot, 1, "sat")["arrived"] == 0

def test_party_arrival_of_guest_without_members():
    ledger = create_test_ledger(guests=[1])
    ledger.toggle_arrival(1, "mon")

    status = reports.party_arrival_status(ledger.snapshot, 1, "mon")
    assert status == {
        "guest_id": 1,
        "day": "mon",
        "arrived": 1,
        "total": 1,
        "is_partial": False,
        "is_complete": True,
        "percentage": 100,
    }
