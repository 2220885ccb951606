import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from helper import to_http_exception
from models import *
from seating.errors import SeatingError
from seating.intents import DeleteAssignment, UpsertAssignment
from seating.keys import Day
from seating.store import SqlSeatingStore

logger = logging.getLogger(__name__)

assignment_router = APIRouter(
    tags=["Assignment"]
)


@assignment_router.get("/assignments", tags=["Assignment"])
def get_assignments(db: Session = Depends(get_db)):
    """
    Retrieves every assignment row. A guest split over several tables has
    one row per table, each with its own seat count.
    """
    try:
        rows = db.query(AssignmentDB).order_by(AssignmentDB.id.asc()).all()
        return [Assignment.model_validate(row).model_dump() for row in rows]
    except Exception as e:
        logger.exception("Get assignments failed")
        raise HTTPException(status_code=500, detail="Failed to fetch assignments") from e


@assignment_router.post("/assignments", tags=["Assignment"])
def upsert_assignment(assignment: Assignment, db: Session = Depends(get_db)):
    """
    Creates the assignment or updates seats and party size override when the
    (guest, table, day, service) row already exists.
    """
    try:
        if not db.query(GuestDB).filter(GuestDB.id == assignment.guest_id).first():
            raise HTTPException(status_code=404, detail="Guest not found")
        if not db.query(TableDB).filter(TableDB.id == assignment.table_id).first():
            raise HTTPException(status_code=404, detail="Table not found")

        SqlSeatingStore(db).commit([UpsertAssignment(**assignment.model_dump())])
        return {"success": True, "assignment": assignment.model_dump()}
    except SeatingError as e:
        raise to_http_exception(e) from e


@assignment_router.delete("/assignments", tags=["Assignment"])
def delete_assignment(
    guest_id: int = Query(...),
    table_id: int = Query(...),
    day: Day = Query(...),
    service_id: int = Query(...),
    db: Session = Depends(get_db)
):

    try:
        SqlSeatingStore(db).commit([DeleteAssignment(guest_id, table_id, day.value, service_id)])
        return {"success": True}
    except SeatingError as e:
        raise to_http_exception(e) from e
