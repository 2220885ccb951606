"""
Storage collaborators for the seating ledger.

A store loads a full ``Snapshot`` and commits an ordered list of intents as one
unit of work. ``SqlSeatingStore`` talks to the database through a SQLAlchemy
session; ``RemoteSeatingStore`` talks to a running API over HTTP.
"""

import logging
from typing import Iterable, List

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.AssignmentDB import AssignmentDB
from models.AttendanceDB import ArrivalDB, BlockedTableDB, DepartureDB
from models.GroupDB import GroupDB, GroupMembershipDB
from models.GroupMemberDB import GroupMemberDB, MemberArrivalDB
from models.GuestDB import GuestDB
from models.TableDB import TableDB
from seating.errors import NotFound, StorageFailure, ValidationError
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
from seating.keys import ArrivalKey, DepartureKey, MemberArrivalKey, TableSlotKey
from seating.snapshot import (
    AssignmentRecord,
    GroupRecord,
    GuestRecord,
    Snapshot,
    TableRecord,
    snapshot_from_payload,
)

logger = logging.getLogger(__name__)


def delete_guest_rows(db: Session, guest_id: int):
    """Deletes a guest and everything that references it. Does not commit."""
    led_group_ids = [g.id for g in db.query(GroupDB.id).filter(GroupDB.lead_guest_id == guest_id)]
    if led_group_ids:
        db.query(GroupMembershipDB).filter(GroupMembershipDB.group_id.in_(led_group_ids)).delete()
        db.query(GroupDB).filter(GroupDB.id.in_(led_group_ids)).delete()

    member_ids = [m.id for m in db.query(GroupMemberDB.id).filter(GroupMemberDB.main_guest_id == guest_id)]
    if member_ids:
        db.query(MemberArrivalDB).filter(MemberArrivalDB.member_id.in_(member_ids)).delete()
        db.query(GroupMemberDB).filter(GroupMemberDB.id.in_(member_ids)).delete()

    for model in (GroupMembershipDB, AssignmentDB, ArrivalDB, DepartureDB):
        db.query(model).filter(model.guest_id == guest_id).delete()
    db.query(GuestDB).filter(GuestDB.id == guest_id).delete()


def delete_table_rows(db: Session, table_id: int):
    """Deletes a table with its assignments and blocks. Does not commit."""
    db.query(AssignmentDB).filter(AssignmentDB.table_id == table_id).delete()
    db.query(BlockedTableDB).filter(BlockedTableDB.table_id == table_id).delete()
    db.query(TableDB).filter(TableDB.id == table_id).delete()


def _upsert_assignment(db: Session, intent: UpsertAssignment):
    row = db.query(AssignmentDB).filter(
        AssignmentDB.guest_id == intent.guest_id,
        AssignmentDB.table_id == intent.table_id,
        AssignmentDB.day == intent.day,
        AssignmentDB.service_id == intent.service_id,
    ).first()
    if row is None:
        db.add(AssignmentDB(
            guest_id=intent.guest_id,
            table_id=intent.table_id,
            day=intent.day,
            service_id=intent.service_id,
            seats=intent.seats,
            party_size_override=intent.party_size_override,
        ))
    else:
        row.seats = intent.seats
        row.party_size_override = intent.party_size_override


def _set_arrival(db: Session, model, id_column, id_value, day, arrived):
    row = db.query(model).filter(id_column == id_value, model.day == day).first()
    if row is None:
        db.add(model(**{id_column.key: id_value, "day": day, "arrived": arrived}))
    else:
        row.arrived = arrived


def apply_intent(db: Session, intent: Intent):
    """Writes one intent through the session. Natural-key conflicts resolve as upserts."""
    if isinstance(intent, UpsertAssignment):
        _upsert_assignment(db, intent)
    elif isinstance(intent, DeleteAssignment):
        db.query(AssignmentDB).filter(
            AssignmentDB.guest_id == intent.guest_id,
            AssignmentDB.table_id == intent.table_id,
            AssignmentDB.day == intent.day,
            AssignmentDB.service_id == intent.service_id,
        ).delete()
    elif isinstance(intent, DeleteGuestAssignments):
        db.query(AssignmentDB).filter(
            AssignmentDB.guest_id == intent.guest_id,
            AssignmentDB.day == intent.day,
            AssignmentDB.service_id == intent.service_id,
        ).delete()
    elif isinstance(intent, SetArrival):
        _set_arrival(db, ArrivalDB, ArrivalDB.guest_id, intent.guest_id, intent.day, intent.arrived)
    elif isinstance(intent, SetMemberArrival):
        _set_arrival(db, MemberArrivalDB, MemberArrivalDB.member_id, intent.member_id, intent.day, intent.arrived)
    elif isinstance(intent, AddDeparture):
        exists = db.query(DepartureDB).filter(
            DepartureDB.guest_id == intent.guest_id,
            DepartureDB.day == intent.day,
            DepartureDB.service_id == intent.service_id,
        ).first()
        if exists is None:
            db.add(DepartureDB(guest_id=intent.guest_id, day=intent.day, service_id=intent.service_id))
    elif isinstance(intent, RemoveDeparture):
        db.query(DepartureDB).filter(
            DepartureDB.guest_id == intent.guest_id,
            DepartureDB.day == intent.day,
            DepartureDB.service_id == intent.service_id,
        ).delete()
    elif isinstance(intent, AddBlock):
        exists = db.query(BlockedTableDB).filter(
            BlockedTableDB.table_id == intent.table_id,
            BlockedTableDB.day == intent.day,
            BlockedTableDB.service_id == intent.service_id,
        ).first()
        if exists is None:
            db.add(BlockedTableDB(table_id=intent.table_id, day=intent.day, service_id=intent.service_id))
    elif isinstance(intent, RemoveBlock):
        db.query(BlockedTableDB).filter(
            BlockedTableDB.table_id == intent.table_id,
            BlockedTableDB.day == intent.day,
            BlockedTableDB.service_id == intent.service_id,
        ).delete()
    elif isinstance(intent, UpdateGuest):
        guest = db.query(GuestDB).filter(GuestDB.id == intent.guest_id).first()
        if guest is None:
            raise NotFound("Guest not found")
        if intent.is_ghost is not None:
            guest.is_ghost = intent.is_ghost
        if intent.notes is not None:
            guest.notes = intent.notes
    elif isinstance(intent, DeleteGuest):
        delete_guest_rows(db, intent.guest_id)
    elif isinstance(intent, DeleteTable):
        delete_table_rows(db, intent.table_id)
    else:
        raise ValidationError(f"Unsupported intent {intent!r}")
    db.flush()


class SqlSeatingStore:
    def __init__(self, db: Session):
        self.db = db

    def load(self) -> Snapshot:
        db = self.db
        snapshot = Snapshot()
        for g in db.query(GuestDB).order_by(GuestDB.id.asc()):
            snapshot.guests[g.id] = GuestRecord(
                id=g.id,
                name=g.name,
                notes=g.notes or "",
                is_ghost=bool(g.is_ghost),
                is_manually_added=bool(g.is_manually_added),
                market=g.market,
                guest_type=g.guest_type,
            )
        for t in db.query(TableDB).order_by(TableDB.id.asc()):
            snapshot.tables[t.id] = TableRecord(id=t.id, name=t.name, capacity=t.capacity, x=t.x, y=t.y)
        for g in db.query(GroupDB).order_by(GroupDB.id.asc()):
            snapshot.groups[g.id] = GroupRecord(
                id=g.id,
                lead_guest_id=g.lead_guest_id,
                name=g.name,
                member_ids=tuple(m.guest_id for m in g.memberships),
            )
        for a in db.query(AssignmentDB).order_by(AssignmentDB.id.asc()):
            row = AssignmentRecord(
                guest_id=a.guest_id,
                table_id=a.table_id,
                day=a.day,
                service_id=a.service_id,
                seats=a.seats or 1,
                party_size_override=a.party_size_override,
            )
            snapshot.assignments[row.key] = row
        snapshot.arrivals = {
            ArrivalKey(a.guest_id, a.day) for a in db.query(ArrivalDB).filter(ArrivalDB.arrived.is_(True))
        }
        snapshot.departures = {
            DepartureKey(d.guest_id, d.day, d.service_id) for d in db.query(DepartureDB)
        }
        snapshot.blocked_tables = {
            TableSlotKey(b.day, b.service_id, b.table_id) for b in db.query(BlockedTableDB)
        }
        snapshot.member_arrivals = {
            MemberArrivalKey(m.member_id, m.day)
            for m in db.query(MemberArrivalDB).filter(MemberArrivalDB.arrived.is_(True))
        }
        snapshot.group_members = {
            m.id: m.main_guest_id for m in db.query(GroupMemberDB).order_by(GroupMemberDB.id.asc())
        }
        return snapshot

    def commit(self, intents: Iterable[Intent]) -> List[dict]:
        intents = list(intents)
        try:
            for intent in intents:
                apply_intent(self.db, intent)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Seating commit of %d intents failed", len(intents))
            raise StorageFailure("Failed to save seating changes") from e
        except Exception:
            self.db.rollback()
            raise
        return [intent.to_dict() for intent in intents]


class MemorySeatingStore:
    """Keeps the state in process memory, e.g. for previews and tests."""

    def __init__(self, snapshot: Snapshot = None):
        self._snapshot = snapshot if snapshot is not None else Snapshot()

    def load(self) -> Snapshot:
        return self._snapshot.copy()

    def commit(self, intents: Iterable[Intent]) -> List[dict]:
        intents = list(intents)
        working = self._snapshot.copy()
        for intent in intents:
            intent.apply(working)
        self._snapshot = working
        return [intent.to_dict() for intent in intents]


class RemoteSeatingStore:
    """Store backed by another instance of this API, e.g. for a polling client."""

    def __init__(self, client: httpx.Client):
        self.client = client

    def _check(self, response: httpx.Response):
        if response.status_code < 400:
            return
        try:
            detail = response.json().get("detail", response.text)
        except ValueError:
            detail = response.text
        if response.status_code == 400:
            raise ValidationError(str(detail))
        if response.status_code == 404:
            raise NotFound(str(detail))
        raise StorageFailure(f"Remote store answered {response.status_code}: {detail}")

    def load(self) -> Snapshot:
        try:
            response = self.client.get("/snapshot")
        except httpx.HTTPError as e:
            raise StorageFailure(f"Could not fetch snapshot: {e}") from e
        self._check(response)
        return snapshot_from_payload(response.json())

    def commit(self, intents: Iterable[Intent]) -> List[dict]:
        body = {"intents": [intent.to_dict() for intent in intents]}
        try:
            response = self.client.post("/ledger/commit", json=body)
        except httpx.HTTPError as e:
            raise StorageFailure(f"Could not commit seating changes: {e}") from e
        self._check(response)
        return response.json().get("applied", [])
