import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from models import *
from seating.keys import Day
from seating.store import delete_table_rows

logger = logging.getLogger(__name__)

table_router = APIRouter(
    # prefix="/tables",
    tags=["Table"]
)

@table_router.get("/tables-with-assignments", tags=["Table"])
def get_tables_with_assignments(day: Day = Query(...), service_id: int = Query(..., ge=1), db: Session = Depends(get_db)):
    """
    Retrieves all tables with the guests seated there for one day and service.

    Returns:
        list: A list of tables, each containing its assignments, occupancy and block flag.
    """
    try:
        tables = db.query(TableDB).order_by(TableDB.id.asc()).all()
        blocked = {
            b.table_id for b in db.query(BlockedTableDB).filter(
                BlockedTableDB.day == day.value,
                BlockedTableDB.service_id == service_id
            )
        }
        result = []
        for table in tables:
            rows = db.query(AssignmentDB, GuestDB).join(GuestDB, GuestDB.id == AssignmentDB.guest_id).filter(
                AssignmentDB.table_id == table.id,
                AssignmentDB.day == day.value,
                AssignmentDB.service_id == service_id
            ).order_by(AssignmentDB.id.asc()).all()
            result.append({
                "id": table.id,
                "name": table.name,
                "capacity": table.capacity,
                "x": table.x,
                "y": table.y,
                "is_blocked": table.id in blocked,
                "occupancy": sum(a.seats for a, _ in rows),
                "assignments": [
                    {
                        "guest_id": guest.id,
                        "guest_name": guest.name,
                        "is_ghost": guest.is_ghost,
                        "seats": a.seats
                    }
                    for a, guest in rows
                ]
            })
        return result
    except Exception as e:
        logger.exception("Get tables with assignments failed")
        raise HTTPException(status_code=500, detail="Failed to fetch tables") from e


@table_router.get("/tables", tags=["Table"])
def get_tables(db: Session = Depends(get_db)):

    try:
        tables = db.query(TableDB).order_by(TableDB.id.asc()).all()
        return [table.__dict__ for table in tables]
    except Exception as e:
        logger.exception("Get tables failed")
        raise HTTPException(status_code=500, detail="Failed to fetch tables") from e


@table_router.get("/tables/{id}", tags=["Table"])
def get_table(id: int, db: Session = Depends(get_db)):

    table = db.query(TableDB).filter(TableDB.id == id).first()
    if not table:
        raise HTTPException(status_code=404, detail="Table not found")
    return table.__dict__


@table_router.post("/tables", tags=["Table"])
def create_table(table: Table, db: Session = Depends(get_db)):

    try:
        db_table = TableDB(**table.model_dump())
        db.add(db_table)
        db.commit()
        db.refresh(db_table)
        return db_table.__dict__
    except Exception as e:
        db.rollback()
        logger.exception("Create table failed")
        raise HTTPException(status_code=500, detail="Failed to create table") from e


@table_router.put("/tables/{id}", tags=["Table"])
def update_table(id: int, updated_table: TableUpdate, db: Session = Depends(get_db)):
    """
    Partial update, used both for moving a table on the floor plan and for
    renaming or resizing it.
    """
    try:
        db_table = db.query(TableDB).filter(TableDB.id == id).first()
        if not db_table:
            raise HTTPException(status_code=404, detail="Table not found")

        for field, value in updated_table.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(db_table, field, value)

        db.commit()
        db.refresh(db_table)
        return {"success": True, "table": db_table.__dict__}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Update table %s failed", id)
        raise HTTPException(status_code=500, detail="Failed to update table") from e


@table_router.delete("/tables/{id}", tags=["Table"])
def delete_table(id: int, db: Session = Depends(get_db)):

    try:
        db_table = db.query(TableDB).filter(TableDB.id == id).first()
        if not db_table:
            raise HTTPException(status_code=404, detail="Table not found")

        delete_table_rows(db, id)
        db.commit()
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Delete table %s failed", id)
        raise HTTPException(status_code=500, detail="Failed to delete table") from e
