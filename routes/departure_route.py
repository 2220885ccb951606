import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from helper import to_http_exception
from models import *
from seating.errors import SeatingError
from seating.intents import AddDeparture, RemoveDeparture
from seating.keys import Day
from seating.store import SqlSeatingStore

logger = logging.getLogger(__name__)

departure_router = APIRouter(
    tags=["Departure"]
)


@departure_router.get("/departures", tags=["Departure"])
def get_departures(day: Optional[Day] = Query(None), db: Session = Depends(get_db)):

    try:
        query = db.query(DepartureDB)
        if day:
            query = query.filter(DepartureDB.day == day.value)
        return [
            {"guest_id": row.guest_id, "day": row.day, "service_id": row.service_id}
            for row in query.order_by(DepartureDB.id.asc()).all()
        ]
    except Exception as e:
        logger.exception("Get departures failed")
        raise HTTPException(status_code=500, detail="Failed to fetch departures") from e


@departure_router.post("/departures", tags=["Departure"])
def add_departure(departure: Departure, db: Session = Depends(get_db)):
    """
    Marks a guest as gone for one service. Marking twice is not an error.
    """
    try:
        SqlSeatingStore(db).commit([AddDeparture(departure.guest_id, departure.day, departure.service_id)])
        return {"success": True, **departure.model_dump()}
    except SeatingError as e:
        raise to_http_exception(e) from e


@departure_router.delete("/departures", tags=["Departure"])
def remove_departure(
    guest_id: int = Query(...),
    day: Day = Query(...),
    service_id: int = Query(...),
    db: Session = Depends(get_db)
):

    try:
        SqlSeatingStore(db).commit([RemoveDeparture(guest_id, day.value, service_id)])
        return {"success": True}
    except SeatingError as e:
        raise to_http_exception(e) from e
