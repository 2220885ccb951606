import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from helper import to_http_exception
from models import *
from seating.errors import SeatingError
from seating.intents import SetArrival
from seating.store import SqlSeatingStore

logger = logging.getLogger(__name__)

arrival_router = APIRouter(
    tags=["Arrival"]
)


@arrival_router.get("/arrivals", tags=["Arrival"])
def get_arrivals(db: Session = Depends(get_db)):
    """
    Retrieves the guests that have arrived, one row per guest and day.
    """
    try:
        rows = db.query(ArrivalDB).filter(ArrivalDB.arrived.is_(True)).order_by(ArrivalDB.id.asc()).all()
        return [{"guest_id": row.guest_id, "day": row.day} for row in rows]
    except Exception as e:
        logger.exception("Get arrivals failed")
        raise HTTPException(status_code=500, detail="Failed to fetch arrivals") from e


@arrival_router.post("/arrivals", tags=["Arrival"])
def set_arrival(arrival: Arrival, db: Session = Depends(get_db)):

    try:
        SqlSeatingStore(db).commit([SetArrival(arrival.guest_id, arrival.day, arrival.arrived)])
        return {"success": True, "guest_id": arrival.guest_id, "day": arrival.day, "arrived": arrival.arrived}
    except SeatingError as e:
        raise to_http_exception(e) from e
