from typing import Dict, List

from seating.errors import NotFound
from seating.groups import guest_group_size
from seating.snapshot import Snapshot


def occupancy(snapshot: Snapshot, table_id: int, day: str, service_id: int) -> int:
    """Seats taken at a table for one slot. A row with ``seats=n`` takes n seats."""
    return sum(row.seats for row in snapshot.rows_at_table(table_id, day, service_id))


def effective_capacity(snapshot: Snapshot, table_id: int, day: str, service_id: int) -> int:
    table = snapshot.tables.get(table_id)
    if table is None:
        raise NotFound("Table not found")
    return table.capacity + snapshot.chair_adjustment(table_id, day, service_id)


def remaining_capacity(snapshot: Snapshot, table_id: int, day: str, service_id: int) -> int:
    return effective_capacity(snapshot, table_id, day, service_id) - occupancy(snapshot, table_id, day, service_id)


def is_over_capacity(snapshot: Snapshot, table_id: int, day: str, service_id: int) -> bool:
    return remaining_capacity(snapshot, table_id, day, service_id) < 0


def available_table_ids(snapshot: Snapshot, day: str, service_id: int) -> List[int]:
    return [t for t in snapshot.tables if not snapshot.is_blocked(t, day, service_id)]


def largest_available_capacity(snapshot: Snapshot, day: str, service_id: int) -> int:
    largest = 0
    for table_id in available_table_ids(snapshot, day, service_id):
        largest = max(largest, remaining_capacity(snapshot, table_id, day, service_id))
    return largest


def needs_split(snapshot: Snapshot, guest_id: int, day: str, service_id: int) -> bool:
    size = guest_group_size(snapshot, guest_id)
    if size <= 1:
        return False
    return size > largest_available_capacity(snapshot, day, service_id)


def can_fit_in_single_table(snapshot: Snapshot, guest_id: int, day: str, service_id: int) -> bool:
    if guest_id not in snapshot.guests:
        return True
    if snapshot.rows_for_guest(guest_id, day, service_id):
        return True
    size = guest_group_size(snapshot, guest_id)
    return any(
        remaining_capacity(snapshot, table_id, day, service_id) >= size
        for table_id in available_table_ids(snapshot, day, service_id)
    )


def fits_table(snapshot: Snapshot, guest_id: int, table_id: int, day: str, service_id: int) -> bool:
    """Whether the guest's party can sit at this table without going over. Blocked tables never fit."""
    if table_id not in snapshot.tables:
        raise NotFound("Table not found")
    if snapshot.is_blocked(table_id, day, service_id):
        return False
    size = guest_group_size(snapshot, guest_id)
    # Seats the party already holds here are freed by the move.
    held = sum(
        row.seats
        for row in snapshot.rows_at_table(table_id, day, service_id)
        if row.guest_id == guest_id
    )
    return remaining_capacity(snapshot, table_id, day, service_id) + held >= size


def table_occupancy(snapshot: Snapshot, day: str, service_id: int) -> List[Dict]:
    result = []
    for table in sorted(snapshot.tables.values(), key=lambda t: t.id):
        used = occupancy(snapshot, table.id, day, service_id)
        capacity = effective_capacity(snapshot, table.id, day, service_id)
        result.append({
            "table_id": table.id,
            "name": table.name,
            "capacity": table.capacity,
            "effective_capacity": capacity,
            "occupancy": used,
            "remaining": capacity - used,
            "is_blocked": snapshot.is_blocked(table.id, day, service_id),
            "is_over_capacity": used > capacity,
        })
    return result


def fit_report(snapshot: Snapshot, guest_id: int, day: str, service_id: int) -> Dict:
    if guest_id not in snapshot.guests:
        raise NotFound("Guest not found")
    return {
        "guest_id": guest_id,
        "group_size": guest_group_size(snapshot, guest_id),
        "largest_available_capacity": largest_available_capacity(snapshot, day, service_id),
        "needs_split": needs_split(snapshot, guest_id, day, service_id),
        "can_fit_in_single_table": can_fit_in_single_table(snapshot, guest_id, day, service_id),
        "fitting_table_ids": [
            table_id
            for table_id in sorted(snapshot.tables)
            if fits_table(snapshot, guest_id, table_id, day, service_id)
        ],
    }
