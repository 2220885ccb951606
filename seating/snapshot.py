"""
In-memory view of the seating state.

A ``Snapshot`` holds every guest, table, group, assignment, arrival, departure
and table block, keyed by composite tuples. Payloads coming from the API are
turned into snapshots here and nowhere else: ``snapshot_from_payload`` accepts
the current row-based format (version 2) and the older keyed-map format
(version 1), so code downstream never has to look at response shapes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from seating.errors import ValidationError
from seating.keys import (
    ArrivalKey,
    AssignmentKey,
    DepartureKey,
    MemberArrivalKey,
    TableSlotKey,
)

PAYLOAD_VERSION = 2


@dataclass(frozen=True)
class GuestRecord:
    id: int
    name: str
    notes: str = ""
    is_ghost: bool = False
    is_manually_added: bool = False
    market: Optional[str] = None
    guest_type: Optional[str] = None


@dataclass(frozen=True)
class TableRecord:
    id: int
    name: str
    capacity: int
    x: int = 250
    y: int = 200


@dataclass(frozen=True)
class GroupRecord:
    id: int
    lead_guest_id: int
    name: Optional[str] = None
    member_ids: Tuple[int, ...] = ()

    @property
    def all_guest_ids(self) -> Tuple[int, ...]:
        return (self.lead_guest_id,) + self.member_ids

    @property
    def size(self) -> int:
        # Ghosts still need a chair, so they count here.
        return 1 + len(self.member_ids)


@dataclass(frozen=True)
class AssignmentRecord:
    guest_id: int
    table_id: int
    day: str
    service_id: int
    seats: int = 1
    party_size_override: Optional[int] = None

    @property
    def key(self) -> AssignmentKey:
        return AssignmentKey(self.guest_id, self.table_id, self.day, self.service_id)

    def to_dict(self) -> dict:
        return {
            "guest_id": self.guest_id,
            "table_id": self.table_id,
            "day": self.day,
            "service_id": self.service_id,
            "seats": self.seats,
            "party_size_override": self.party_size_override,
        }


@dataclass
class Snapshot:
    guests: Dict[int, GuestRecord] = field(default_factory=dict)
    tables: Dict[int, TableRecord] = field(default_factory=dict)
    groups: Dict[int, GroupRecord] = field(default_factory=dict)
    assignments: Dict[AssignmentKey, AssignmentRecord] = field(default_factory=dict)
    arrivals: Set[ArrivalKey] = field(default_factory=set)
    departures: Set[DepartureKey] = field(default_factory=set)
    blocked_tables: Set[TableSlotKey] = field(default_factory=set)
    member_arrivals: Set[MemberArrivalKey] = field(default_factory=set)
    # Legacy named members without a guest row: member_id -> main guest id.
    group_members: Dict[int, int] = field(default_factory=dict)
    # Borrowed chairs live only in memory and are never persisted.
    chair_adjustments: Dict[TableSlotKey, int] = field(default_factory=dict)

    def copy(self) -> "Snapshot":
        return Snapshot(
            guests=dict(self.guests),
            tables=dict(self.tables),
            groups=dict(self.groups),
            assignments=dict(self.assignments),
            arrivals=set(self.arrivals),
            departures=set(self.departures),
            blocked_tables=set(self.blocked_tables),
            member_arrivals=set(self.member_arrivals),
            group_members=dict(self.group_members),
            chair_adjustments=dict(self.chair_adjustments),
        )

    def rows_for_slot(self, day: str, service_id: int) -> List[AssignmentRecord]:
        return [
            row for row in self.assignments.values()
            if row.day == day and row.service_id == service_id
        ]

    def rows_at_table(self, table_id: int, day: str, service_id: int) -> List[AssignmentRecord]:
        return [row for row in self.rows_for_slot(day, service_id) if row.table_id == table_id]

    def rows_for_guest(self, guest_id: int, day: str, service_id: int) -> List[AssignmentRecord]:
        return [row for row in self.rows_for_slot(day, service_id) if row.guest_id == guest_id]

    def is_blocked(self, table_id: int, day: str, service_id: int) -> bool:
        return TableSlotKey(day, service_id, table_id) in self.blocked_tables

    def chair_adjustment(self, table_id: int, day: str, service_id: int) -> int:
        return self.chair_adjustments.get(TableSlotKey(day, service_id, table_id), 0)

    def has_arrived(self, guest_id: int, day: str) -> bool:
        return ArrivalKey(guest_id, day) in self.arrivals

    def has_departed(self, guest_id: int, day: str, service_id: int) -> bool:
        return DepartureKey(guest_id, day, service_id) in self.departures

    def is_counted(self, guest_id: int) -> bool:
        """Whether a guest counts toward headcounts. Ghosts sit but are not counted."""
        guest = self.guests.get(guest_id)
        return guest is not None and not guest.is_ghost

    def headcount(self, guest_ids: Iterable[int]) -> int:
        return sum(1 for guest_id in set(guest_ids) if self.is_counted(guest_id))


# -------- payloads --------

def snapshot_to_payload(snapshot: Snapshot, version: int = PAYLOAD_VERSION) -> dict:
    if version == 1:
        return _to_legacy_payload(snapshot)
    if version != PAYLOAD_VERSION:
        raise ValidationError(f"Unsupported snapshot version {version}")

    return {
        "version": PAYLOAD_VERSION,
        "guests": [
            {
                "id": g.id,
                "name": g.name,
                "notes": g.notes,
                "is_ghost": g.is_ghost,
                "is_manually_added": g.is_manually_added,
                "market": g.market,
                "guest_type": g.guest_type,
            }
            for g in snapshot.guests.values()
        ],
        "tables": [
            {"id": t.id, "name": t.name, "capacity": t.capacity, "x": t.x, "y": t.y}
            for t in snapshot.tables.values()
        ],
        "groups": [
            {
                "id": g.id,
                "name": g.name,
                "lead_guest_id": g.lead_guest_id,
                "member_ids": list(g.member_ids),
            }
            for g in snapshot.groups.values()
        ],
        "assignments": [row.to_dict() for row in snapshot.assignments.values()],
        "arrivals": [{"guest_id": k.guest_id, "day": k.day} for k in sorted(snapshot.arrivals)],
        "departures": [
            {"guest_id": k.guest_id, "day": k.day, "service_id": k.service_id}
            for k in sorted(snapshot.departures)
        ],
        "blocked_tables": [
            {"table_id": k.table_id, "day": k.day, "service_id": k.service_id}
            for k in sorted(snapshot.blocked_tables)
        ],
        "member_arrivals": [
            {"member_id": k.member_id, "day": k.day} for k in sorted(snapshot.member_arrivals)
        ],
        "group_members": [
            {"id": member_id, "main_guest_id": guest_id}
            for member_id, guest_id in sorted(snapshot.group_members.items())
        ],
    }


def snapshot_from_payload(payload: dict) -> Snapshot:
    version = payload.get("version", 1)
    if version == PAYLOAD_VERSION:
        return _from_payload(payload)
    if version == 1:
        return _from_legacy_payload(payload)
    raise ValidationError(f"Unsupported snapshot version {version}")


def _from_payload(payload: dict) -> Snapshot:
    snapshot = Snapshot()
    for g in payload.get("guests", []):
        snapshot.guests[g["id"]] = GuestRecord(
            id=g["id"],
            name=g["name"],
            notes=g.get("notes") or "",
            is_ghost=bool(g.get("is_ghost")),
            is_manually_added=bool(g.get("is_manually_added")),
            market=g.get("market"),
            guest_type=g.get("guest_type"),
        )
    for t in payload.get("tables", []):
        snapshot.tables[t["id"]] = TableRecord(
            id=t["id"], name=t["name"], capacity=t["capacity"], x=t.get("x", 250), y=t.get("y", 200)
        )
    for g in payload.get("groups", []):
        snapshot.groups[g["id"]] = GroupRecord(
            id=g["id"],
            lead_guest_id=g["lead_guest_id"],
            name=g.get("name"),
            member_ids=tuple(g.get("member_ids", [])),
        )
    for a in payload.get("assignments", []):
        row = AssignmentRecord(
            guest_id=a["guest_id"],
            table_id=a["table_id"],
            day=a["day"],
            service_id=a["service_id"],
            seats=a.get("seats") or 1,
            party_size_override=a.get("party_size_override"),
        )
        snapshot.assignments[row.key] = row
    snapshot.arrivals = {ArrivalKey(a["guest_id"], a["day"]) for a in payload.get("arrivals", [])}
    snapshot.departures = {
        DepartureKey(d["guest_id"], d["day"], d["service_id"]) for d in payload.get("departures", [])
    }
    snapshot.blocked_tables = {
        TableSlotKey(b["day"], b["service_id"], b["table_id"]) for b in payload.get("blocked_tables", [])
    }
    snapshot.member_arrivals = {
        MemberArrivalKey(m["member_id"], m["day"]) for m in payload.get("member_arrivals", [])
    }
    snapshot.group_members = {m["id"]: m["main_guest_id"] for m in payload.get("group_members", [])}
    return snapshot


# -------- legacy (version 1) keyed-map format --------

def _split_key(key: str, parts: int) -> List[str]:
    pieces = key.split("-")
    if len(pieces) != parts:
        raise ValidationError(f"Malformed legacy key '{key}'")
    return pieces


def _from_legacy_payload(payload: dict) -> Snapshot:
    snapshot = Snapshot()
    for g in payload.get("guests", []):
        snapshot.guests[g["id"]] = GuestRecord(
            id=g["id"],
            name=g["name"],
            notes=g.get("notes") or "",
            is_ghost=bool(g.get("isGhost")),
            is_manually_added=bool(g.get("isManuallyAdded")),
            market=g.get("market"),
            guest_type=g.get("guestType"),
        )
    for t in payload.get("tables", []):
        snapshot.tables[t["id"]] = TableRecord(
            id=t["id"], name=t["name"], capacity=t["capacity"], x=t.get("x", 250), y=t.get("y", 200)
        )
    for g in payload.get("groups", []):
        snapshot.groups[g["id"]] = GroupRecord(
            id=g["id"],
            lead_guest_id=g["leadGuestId"],
            name=g.get("name"),
            member_ids=tuple(m["guestId"] for m in g.get("members", [])),
        )

    seat_allocations = payload.get("seatAllocations", {})
    overrides = payload.get("partySizeOverrides", {})
    for key, guest_ids in payload.get("assignments", {}).items():
        day, service_id, table_id = _split_key(key, 3)
        service_id, table_id = int(service_id), int(table_id)
        for guest_id in dict.fromkeys(guest_ids):
            alloc_key = f"{day}-{service_id}-{guest_id}"
            # Older payloads repeat a guest id once per seat.
            seats = seat_allocations.get(alloc_key, {}).get(str(table_id), guest_ids.count(guest_id))
            row = AssignmentRecord(
                guest_id=guest_id,
                table_id=table_id,
                day=day,
                service_id=service_id,
                seats=seats,
                party_size_override=overrides.get(alloc_key),
            )
            snapshot.assignments[row.key] = row

    for day, guest_ids in payload.get("arrivals", {}).items():
        snapshot.arrivals.update(ArrivalKey(guest_id, day) for guest_id in guest_ids)
    for key, guest_ids in payload.get("departures", {}).items():
        day, service_id = _split_key(key, 2)
        snapshot.departures.update(DepartureKey(guest_id, day, int(service_id)) for guest_id in guest_ids)
    for key, blocked in payload.get("blocked", {}).items():
        if blocked:
            day, service_id, table_id = _split_key(key, 3)
            snapshot.blocked_tables.add(TableSlotKey(day, int(service_id), int(table_id)))
    return snapshot


def _to_legacy_payload(snapshot: Snapshot) -> dict:
    assignments: Dict[str, List[int]] = {}
    seat_allocations: Dict[str, Dict[str, int]] = {}
    overrides: Dict[str, int] = {}
    for row in snapshot.assignments.values():
        key = f"{row.day}-{row.service_id}-{row.table_id}"
        assignments.setdefault(key, []).extend([row.guest_id] * row.seats)
        alloc_key = f"{row.day}-{row.service_id}-{row.guest_id}"
        seat_allocations.setdefault(alloc_key, {})[str(row.table_id)] = row.seats
        if row.party_size_override:
            overrides[alloc_key] = row.party_size_override

    arrivals: Dict[str, List[int]] = {}
    for k in sorted(snapshot.arrivals):
        arrivals.setdefault(k.day, []).append(k.guest_id)
    departures: Dict[str, List[int]] = {}
    for k in sorted(snapshot.departures):
        departures.setdefault(f"{k.day}-{k.service_id}", []).append(k.guest_id)

    return {
        "version": 1,
        "guests": [
            {
                "id": g.id,
                "name": g.name,
                "notes": g.notes,
                "isGhost": g.is_ghost,
                "isManuallyAdded": g.is_manually_added,
                "market": g.market,
                "guestType": g.guest_type,
            }
            for g in snapshot.guests.values()
        ],
        "tables": [
            {"id": t.id, "name": t.name, "capacity": t.capacity, "x": t.x, "y": t.y}
            for t in snapshot.tables.values()
        ],
        "groups": [
            {
                "id": g.id,
                "name": g.name,
                "leadGuestId": g.lead_guest_id,
                "members": [{"guestId": member_id} for member_id in g.member_ids],
            }
            for g in snapshot.groups.values()
        ],
        "assignments": assignments,
        "seatAllocations": seat_allocations,
        "partySizeOverrides": overrides,
        "arrivals": arrivals,
        "departures": departures,
        "blocked": {f"{k.day}-{k.service_id}-{k.table_id}": True for k in snapshot.blocked_tables},
    }
