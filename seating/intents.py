"""
Unit-of-work intents.

Every ledger command is expressed as an ordered list of intents. A store
applies the whole list inside one transaction; the ledger then replays the same
list onto its in-memory snapshot. Each intent knows how to serialise itself for
``POST /ledger/commit`` and how to apply itself to a ``Snapshot``.
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import ClassVar, Dict, List, Optional, Type, get_args

from seating.errors import ValidationError
from seating.keys import (
    DAYS,
    ArrivalKey,
    AssignmentKey,
    DepartureKey,
    MemberArrivalKey,
    TableSlotKey,
)
from seating.snapshot import AssignmentRecord, Snapshot


def _check_slot(day: str, service_id: int):
    if day not in DAYS:
        raise ValidationError(f"Unknown day '{day}'")
    if not isinstance(service_id, int) or service_id < 1:
        raise ValidationError("service_id must be a positive integer")


@dataclass(frozen=True)
class Intent:
    kind: ClassVar[str] = ""

    def to_dict(self) -> dict:
        return {"kind": self.kind, **asdict(self)}

    def validate(self):
        pass

    def apply(self, snapshot: Snapshot):
        raise NotImplementedError


@dataclass(frozen=True)
class UpsertAssignment(Intent):
    kind: ClassVar[str] = "upsert_assignment"

    guest_id: int
    table_id: int
    day: str
    service_id: int
    seats: int = 1
    party_size_override: Optional[int] = None

    @property
    def key(self) -> AssignmentKey:
        return AssignmentKey(self.guest_id, self.table_id, self.day, self.service_id)

    def validate(self):
        _check_slot(self.day, self.service_id)
        if self.seats < 1:
            raise ValidationError("seats must be at least 1")

    def apply(self, snapshot: Snapshot):
        snapshot.assignments[self.key] = AssignmentRecord(
            guest_id=self.guest_id,
            table_id=self.table_id,
            day=self.day,
            service_id=self.service_id,
            seats=self.seats,
            party_size_override=self.party_size_override,
        )


@dataclass(frozen=True)
class DeleteAssignment(Intent):
    kind: ClassVar[str] = "delete_assignment"

    guest_id: int
    table_id: int
    day: str
    service_id: int

    def apply(self, snapshot: Snapshot):
        snapshot.assignments.pop(AssignmentKey(self.guest_id, self.table_id, self.day, self.service_id), None)


@dataclass(frozen=True)
class DeleteGuestAssignments(Intent):
    """Removes every row of one guest in one (day, service), at any table."""

    kind: ClassVar[str] = "delete_guest_assignments"

    guest_id: int
    day: str
    service_id: int

    def apply(self, snapshot: Snapshot):
        for row in snapshot.rows_for_guest(self.guest_id, self.day, self.service_id):
            del snapshot.assignments[row.key]


@dataclass(frozen=True)
class SetArrival(Intent):
    kind: ClassVar[str] = "set_arrival"

    guest_id: int
    day: str
    arrived: bool

    def validate(self):
        if self.day not in DAYS:
            raise ValidationError(f"Unknown day '{self.day}'")

    def apply(self, snapshot: Snapshot):
        key = ArrivalKey(self.guest_id, self.day)
        if self.arrived:
            snapshot.arrivals.add(key)
        else:
            snapshot.arrivals.discard(key)


@dataclass(frozen=True)
class AddDeparture(Intent):
    kind: ClassVar[str] = "add_departure"

    guest_id: int
    day: str
    service_id: int

    def validate(self):
        _check_slot(self.day, self.service_id)

    def apply(self, snapshot: Snapshot):
        snapshot.departures.add(DepartureKey(self.guest_id, self.day, self.service_id))


@dataclass(frozen=True)
class RemoveDeparture(Intent):
    kind: ClassVar[str] = "remove_departure"

    guest_id: int
    day: str
    service_id: int

    def apply(self, snapshot: Snapshot):
        snapshot.departures.discard(DepartureKey(self.guest_id, self.day, self.service_id))


@dataclass(frozen=True)
class AddBlock(Intent):
    kind: ClassVar[str] = "add_block"

    table_id: int
    day: str
    service_id: int

    def validate(self):
        _check_slot(self.day, self.service_id)

    def apply(self, snapshot: Snapshot):
        snapshot.blocked_tables.add(TableSlotKey(self.day, self.service_id, self.table_id))


@dataclass(frozen=True)
class RemoveBlock(Intent):
    kind: ClassVar[str] = "remove_block"

    table_id: int
    day: str
    service_id: int

    def apply(self, snapshot: Snapshot):
        snapshot.blocked_tables.discard(TableSlotKey(self.day, self.service_id, self.table_id))


@dataclass(frozen=True)
class SetMemberArrival(Intent):
    kind: ClassVar[str] = "set_member_arrival"

    member_id: int
    day: str
    arrived: bool

    def validate(self):
        if self.day not in DAYS:
            raise ValidationError(f"Unknown day '{self.day}'")

    def apply(self, snapshot: Snapshot):
        key = MemberArrivalKey(self.member_id, self.day)
        if self.arrived:
            snapshot.member_arrivals.add(key)
        else:
            snapshot.member_arrivals.discard(key)


@dataclass(frozen=True)
class UpdateGuest(Intent):
    kind: ClassVar[str] = "update_guest"

    guest_id: int
    is_ghost: Optional[bool] = None
    notes: Optional[str] = None

    def apply(self, snapshot: Snapshot):
        guest = snapshot.guests.get(self.guest_id)
        if guest is None:
            return
        changes = {k: v for k, v in (("is_ghost", self.is_ghost), ("notes", self.notes)) if v is not None}
        snapshot.guests[self.guest_id] = replace(guest, **changes)


@dataclass(frozen=True)
class DeleteGuest(Intent):
    kind: ClassVar[str] = "delete_guest"

    guest_id: int

    def apply(self, snapshot: Snapshot):
        snapshot.guests.pop(self.guest_id, None)
        snapshot.assignments = {k: v for k, v in snapshot.assignments.items() if k.guest_id != self.guest_id}
        snapshot.arrivals = {k for k in snapshot.arrivals if k.guest_id != self.guest_id}
        snapshot.departures = {k for k in snapshot.departures if k.guest_id != self.guest_id}
        member_ids = {m for m, guest_id in snapshot.group_members.items() if guest_id == self.guest_id}
        snapshot.group_members = {m: g for m, g in snapshot.group_members.items() if m not in member_ids}
        snapshot.member_arrivals = {k for k in snapshot.member_arrivals if k.member_id not in member_ids}

        groups = {}
        for group_id, group in snapshot.groups.items():
            if group.lead_guest_id == self.guest_id:
                continue
            if self.guest_id in group.member_ids:
                group = replace(group, member_ids=tuple(m for m in group.member_ids if m != self.guest_id))
            groups[group_id] = group
        snapshot.groups = groups


@dataclass(frozen=True)
class DeleteTable(Intent):
    kind: ClassVar[str] = "delete_table"

    table_id: int

    def apply(self, snapshot: Snapshot):
        snapshot.tables.pop(self.table_id, None)
        snapshot.assignments = {k: v for k, v in snapshot.assignments.items() if k.table_id != self.table_id}
        snapshot.blocked_tables = {k for k in snapshot.blocked_tables if k.table_id != self.table_id}
        snapshot.chair_adjustments = {
            k: v for k, v in snapshot.chair_adjustments.items() if k.table_id != self.table_id
        }


INTENT_TYPES: Dict[str, Type[Intent]] = {
    cls.kind: cls
    for cls in (
        UpsertAssignment,
        DeleteAssignment,
        DeleteGuestAssignments,
        SetArrival,
        AddDeparture,
        RemoveDeparture,
        AddBlock,
        RemoveBlock,
        SetMemberArrival,
        UpdateGuest,
        DeleteGuest,
        DeleteTable,
    )
}


def _check_field_types(intent: Intent):
    """Payload values arrive untyped; reject the ones that do not match the field."""
    for f in fields(intent):
        value = getattr(intent, f.name)
        allowed = get_args(f.type) or (f.type,)
        # bool is an int subclass, but a flag is never an id or a count
        if isinstance(value, bool) and bool not in allowed:
            matches = False
        else:
            matches = isinstance(value, allowed)
        if not matches:
            expected = " or ".join(t.__name__ for t in allowed if t is not type(None))
            raise ValidationError(f"Invalid '{intent.kind}' intent: {f.name} must be {expected}")


def intent_from_dict(data: dict) -> Intent:
    data = dict(data)
    kind = data.pop("kind", None)
    if kind not in INTENT_TYPES:
        raise ValidationError(f"Unknown intent kind '{kind}'")
    try:
        intent = INTENT_TYPES[kind](**data)
    except TypeError as e:
        raise ValidationError(f"Invalid '{kind}' intent: {e}") from e
    _check_field_types(intent)
    intent.validate()
    return intent


def intents_from_list(items: List[dict]) -> List[Intent]:
    return [intent_from_dict(item) for item in items]
