import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from helper import get_ledger, to_http_exception
from models import *
from seating import capacity, reports
from seating.errors import NotFound, SeatingError
from seating.groups import (
    AssignStatus,
    get_group,
    group_assignment_status,
    table_guests_grouped,
    unassigned_guest_ids,
)
from seating.intents import intents_from_list
from seating.keys import Day
from seating.snapshot import PAYLOAD_VERSION, snapshot_to_payload
from seating.store import SqlSeatingStore

logger = logging.getLogger(__name__)

ledger_router = APIRouter(
    tags=["Ledger"]
)


@ledger_router.get("/snapshot", tags=["Ledger"])
def get_snapshot(version: int = Query(PAYLOAD_VERSION), db: Session = Depends(get_db)):
    """
    Returns the whole seating state in one payload, the format polling clients
    load from. ``version=1`` returns the older keyed-map format.
    """
    try:
        return snapshot_to_payload(SqlSeatingStore(db).load(), version=version)
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/commit", tags=["Ledger"])
def commit_intents(request: CommitRequest, db: Session = Depends(get_db)):
    """
    Applies a list of intents as one transaction. Either all of them are
    written or none.
    """
    try:
        intents = intents_from_list(request.intents)
        applied = SqlSeatingStore(db).commit(intents)
        return {"success": True, "applied": applied}
    except SeatingError as e:
        raise to_http_exception(e) from e


# -------- commands --------

@ledger_router.post("/ledger/assign-guest", tags=["Ledger"])
def assign_guest(request: AssignGuestRequest, db: Session = Depends(get_db)):
    """
    Group-aware placement. When the guest leads several groups, or is a
    member and no scope was given, nothing is written and the response says
    which choice is needed.
    """
    try:
        ledger = get_ledger(db)
        outcome = ledger.assign_guest(
            request.guest_id,
            request.table_id,
            request.day,
            request.service_id,
            group_id=request.group_id,
            scope=request.scope,
        )
        return {"success": outcome.status == AssignStatus.ASSIGNED, "outcome": outcome.to_dict()}
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/move", tags=["Ledger"])
def move_guest(request: MoveRequest, db: Session = Depends(get_db)):

    try:
        ledger = get_ledger(db)
        row = ledger.move(request.guest_id, request.from_table_id, request.to_table_id, request.day, request.service_id)
        return {"success": True, "assignment": row.to_dict()}
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/move-group", tags=["Ledger"])
def move_group(request: MoveGroupRequest, db: Session = Depends(get_db)):

    try:
        ledger = get_ledger(db)
        guest_ids = ledger.move_group(
            request.lead_guest_id, request.group_id, request.to_table_id, request.day, request.service_id
        )
        return {"success": True, "guest_ids": guest_ids}
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/move-guests", tags=["Ledger"])
def move_guests(request: MoveGuestsRequest, db: Session = Depends(get_db)):

    try:
        ledger = get_ledger(db)
        guest_ids = ledger.move_guests(
            request.guest_ids, request.from_table_id, request.to_table_id, request.day, request.service_id
        )
        return {"success": True, "guest_ids": guest_ids}
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/split", tags=["Ledger"])
def split_guest(request: SplitRequest, db: Session = Depends(get_db)):
    """
    Spreads a party over several tables. The seats must add up to the party's
    group size, otherwise 400 and nothing changes.
    """
    try:
        ledger = get_ledger(db)
        rows = ledger.split(
            request.guest_id,
            request.day,
            request.service_id,
            [(a.table_id, a.seats) for a in request.allocations],
        )
        return {"success": True, "assignments": [row.to_dict() for row in rows]}
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/split-by-member", tags=["Ledger"])
def split_by_member(request: SplitByMemberRequest, db: Session = Depends(get_db)):

    try:
        ledger = get_ledger(db)
        table_ids = ledger.split_by_member(request.group_id, request.day, request.service_id, request.member_tables)
        return {"success": True, "table_ids": table_ids}
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/arrivals/toggle", tags=["Ledger"])
def toggle_arrival(request: ToggleArrivalRequest, db: Session = Depends(get_db)):

    try:
        arrived = get_ledger(db).toggle_arrival(request.guest_id, request.day)
        return {"success": True, "arrived": arrived}
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/departures/toggle", tags=["Ledger"])
def toggle_departure(request: ToggleDepartureRequest, db: Session = Depends(get_db)):

    try:
        departed = get_ledger(db).toggle_departure(request.guest_id, request.day, request.service_id)
        return {"success": True, "departed": departed}
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/blocks/toggle", tags=["Ledger"])
def toggle_block(request: ToggleBlockRequest, db: Session = Depends(get_db)):

    try:
        blocked = get_ledger(db).toggle_block(request.table_id, request.day, request.service_id)
        return {"success": True, "blocked": blocked}
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/member-arrivals/toggle", tags=["Ledger"])
def toggle_member_arrival(request: ToggleMemberArrivalRequest, db: Session = Depends(get_db)):

    try:
        arrived = get_ledger(db).toggle_member_arrival(request.member_id, request.day)
        return {"success": True, "arrived": arrived}
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.post("/ledger/ghost/toggle", tags=["Ledger"])
def toggle_ghost(request: ToggleGhostRequest, db: Session = Depends(get_db)):

    try:
        is_ghost = get_ledger(db).toggle_ghost(request.guest_id)
        return {"success": True, "is_ghost": is_ghost}
    except SeatingError as e:
        raise to_http_exception(e) from e


# -------- views --------

@ledger_router.get("/ledger/occupancy", tags=["Ledger"])
def get_occupancy(day: Day = Query(...), service_id: int = Query(..., ge=1), db: Session = Depends(get_db)):

    try:
        return capacity.table_occupancy(get_ledger(db).snapshot, day.value, service_id)
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.get("/ledger/fit/{guest_id}", tags=["Ledger"])
def get_fit(guest_id: int, day: Day = Query(...), service_id: int = Query(..., ge=1), db: Session = Depends(get_db)):
    """
    Whether the guest's party fits one table for the slot, and which tables.
    Blocked tables never fit.
    """
    try:
        return capacity.fit_report(get_ledger(db).snapshot, guest_id, day.value, service_id)
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.get("/ledger/groups/{group_id}/status", tags=["Ledger"])
def get_group_status(group_id: int, day: Day = Query(...), service_id: int = Query(..., ge=1), db: Session = Depends(get_db)):

    try:
        snapshot = get_ledger(db).snapshot
        get_group(snapshot, group_id)
        return group_assignment_status(snapshot, group_id, day.value, service_id).to_dict()
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.get("/ledger/tables/{table_id}/guests", tags=["Ledger"])
def get_table_guests(table_id: int, day: Day = Query(...), service_id: int = Query(..., ge=1), db: Session = Depends(get_db)):

    try:
        snapshot = get_ledger(db).snapshot
        if table_id not in snapshot.tables:
            raise NotFound("Table not found")
        return table_guests_grouped(snapshot, table_id, day.value, service_id)
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.get("/ledger/unassigned", tags=["Ledger"])
def get_unassigned(day: Day = Query(...), service_id: int = Query(..., ge=1), db: Session = Depends(get_db)):

    try:
        snapshot = get_ledger(db).snapshot
        return [
            {"id": g, "name": snapshot.guests[g].name, "is_ghost": snapshot.guests[g].is_ghost}
            for g in unassigned_guest_ids(snapshot, day.value, service_id)
        ]
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.get("/ledger/stats", tags=["Ledger"])
def get_stats(day: Optional[Day] = Query(None), db: Session = Depends(get_db)):
    """
    Attendance figures for one day, or the whole week without ``day``.
    Ghost guests are not counted.
    """
    try:
        snapshot = get_ledger(db).snapshot
        if day:
            return reports.attendance_summary(snapshot, day.value)
        return reports.weekly_summary(snapshot)
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.get("/ledger/arrivals/{guest_id}", tags=["Ledger"])
def get_party_arrival(guest_id: int, day: Day = Query(...), db: Session = Depends(get_db)):
    """
    How many of a guest's party have arrived, counting the named members
    registered under the guest.
    """
    try:
        snapshot = get_ledger(db).snapshot
        if guest_id not in snapshot.guests:
            raise NotFound("Guest not found")
        return reports.party_arrival_status(snapshot, guest_id, day.value)
    except SeatingError as e:
        raise to_http_exception(e) from e


@ledger_router.get("/ledger/duplicates", tags=["Ledger"])
def get_duplicate_guests(db: Session = Depends(get_db)):

    try:
        snapshot = get_ledger(db).snapshot
        return [
            {"id": g, "name": snapshot.guests[g].name}
            for g in reports.duplicate_guest_ids(snapshot)
        ]
    except SeatingError as e:
        raise to_http_exception(e) from e
