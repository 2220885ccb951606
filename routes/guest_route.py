import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from models import *
from seating.store import delete_guest_rows

logger = logging.getLogger(__name__)

guest_router = APIRouter(
    tags=["Guest"]
)


@guest_router.get("/guests", tags=["Guest"])
def get_guests(db: Session = Depends(get_db)):
    """
    Retrieves all guests, newest first.

    Returns:
        list: A list of guests.
    """
    try:
        guests = db.query(GuestDB).order_by(GuestDB.created_at.desc(), GuestDB.id.desc()).all()
        return [guest.__dict__ for guest in guests]
    except Exception as e:
        logger.exception("Get guests failed")
        raise HTTPException(status_code=500, detail="Failed to fetch guests") from e


@guest_router.get("/guests/{id}", tags=["Guest"])
def get_guest(id: int, db: Session = Depends(get_db)):
    guest = db.query(GuestDB).filter(GuestDB.id == id).first()
    if not guest:
        raise HTTPException(status_code=404, detail="Guest not found")
    return guest.__dict__


@guest_router.post("/guests", tags=["Guest"])
def create_guest(guest: Guest, db: Session = Depends(get_db)):
    """
    Creates a guest. Ghost guests take a seat but are left out of headcounts.
    """
    try:
        db_guest = GuestDB(**guest.model_dump())
        db.add(db_guest)
        db.commit()
        db.refresh(db_guest)
        logger.info("Guest %s created", db_guest.id)
        return db_guest.__dict__
    except Exception as e:
        db.rollback()
        logger.exception("Create guest failed")
        raise HTTPException(status_code=500, detail="Failed to create guest") from e


@guest_router.put("/guests/{id}", tags=["Guest"])
def update_guest(id: int, updated_guest: GuestUpdate, db: Session = Depends(get_db)):
    """
    Updates only the fields that were sent.
    """
    try:
        db_guest = db.query(GuestDB).filter(GuestDB.id == id).first()
        if not db_guest:
            raise HTTPException(status_code=404, detail="Guest not found")

        for field, value in updated_guest.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(db_guest, field, value)

        db.commit()
        db.refresh(db_guest)
        return {"success": True, "guest": db_guest.__dict__}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Update guest %s failed", id)
        raise HTTPException(status_code=500, detail="Failed to update guest") from e


@guest_router.delete("/guests/{id}", tags=["Guest"])
def delete_guest(id: int, db: Session = Depends(get_db)):
    """
    Deletes a guest with its assignments, arrivals, departures, memberships
    and the groups it leads.
    """
    try:
        db_guest = db.query(GuestDB).filter(GuestDB.id == id).first()
        if not db_guest:
            raise HTTPException(status_code=404, detail="Guest not found")

        delete_guest_rows(db, id)
        db.commit()
        logger.info("Guest %s deleted", id)
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Delete guest %s failed", id)
        raise HTTPException(status_code=500, detail="Failed to delete guest") from e


@guest_router.delete("/guests", tags=["Guest"])
def delete_all_guests(db: Session = Depends(get_db)):
    """
    Deletes every guest and all guest related data. Tables stay.
    """
    try:
        for model in (
            AssignmentDB,
            ArrivalDB,
            DepartureDB,
            MemberArrivalDB,
            GroupMembershipDB,
            GroupDB,
            GroupMemberDB,
            GuestDB,
        ):
            db.query(model).delete(synchronize_session=False)
        db.commit()
        logger.info("All guest data deleted")
        return {"success": True, "message": "All guest data has been deleted successfully"}
    except Exception as e:
        db.rollback()
        logger.exception("Delete all guests failed")
        raise HTTPException(status_code=500, detail="Failed to delete all guest data") from e
