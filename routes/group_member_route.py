import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from helper import to_http_exception
from models import *
from seating.errors import SeatingError
from seating.intents import SetMemberArrival
from seating.store import SqlSeatingStore

logger = logging.getLogger(__name__)

# Named members without their own guest row, used by older clients.
group_member_router = APIRouter(
    tags=["GroupMember"]
)


@group_member_router.get("/group-members", tags=["GroupMember"])
def get_group_members(main_guest_id: Optional[int] = Query(None), db: Session = Depends(get_db)):

    try:
        query = db.query(GroupMemberDB)
        if main_guest_id:
            query = query.filter(GroupMemberDB.main_guest_id == main_guest_id)
        members = query.order_by(GroupMemberDB.main_guest_id.asc(), GroupMemberDB.id.asc()).all()
        return [member.__dict__ for member in members]
    except Exception as e:
        logger.exception("Get group members failed")
        raise HTTPException(status_code=500, detail="Failed to fetch group members") from e


@group_member_router.post("/group-members", tags=["GroupMember"])
def create_group_member(member: GroupMember, db: Session = Depends(get_db)):

    if not member.main_guest_id or not member.name:
        raise HTTPException(status_code=400, detail="Main guest ID and name required")
    try:
        if not db.query(GuestDB).filter(GuestDB.id == member.main_guest_id).first():
            raise HTTPException(status_code=404, detail="Guest not found")

        db_member = GroupMemberDB(main_guest_id=member.main_guest_id, name=member.name)
        db.add(db_member)
        db.commit()
        db.refresh(db_member)
        return db_member.__dict__
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Create group member failed")
        raise HTTPException(status_code=500, detail="Failed to create group member") from e


@group_member_router.delete("/group-members/{id}", tags=["GroupMember"])
def delete_group_member(id: int, db: Session = Depends(get_db)):

    try:
        db.query(MemberArrivalDB).filter(MemberArrivalDB.member_id == id).delete(synchronize_session=False)
        db.query(GroupMemberDB).filter(GroupMemberDB.id == id).delete(synchronize_session=False)
        db.commit()
        return {"success": True}
    except Exception as e:
        db.rollback()
        logger.exception("Delete group member %s failed", id)
        raise HTTPException(status_code=500, detail="Failed to delete group member") from e


@group_member_router.get("/member-arrivals", tags=["GroupMember"])
def get_member_arrivals(db: Session = Depends(get_db)):
    """
    Returns arrival flags as {day: {member_id: arrived}}.
    """
    try:
        result = {}
        for row in db.query(MemberArrivalDB).all():
            result.setdefault(row.day, {})[row.member_id] = row.arrived
        return result
    except Exception as e:
        logger.exception("Get member arrivals failed")
        raise HTTPException(status_code=500, detail="Failed to fetch member arrivals") from e


@group_member_router.post("/member-arrivals", tags=["GroupMember"])
def set_member_arrival(arrival: MemberArrival, db: Session = Depends(get_db)):

    try:
        SqlSeatingStore(db).commit([SetMemberArrival(arrival.member_id, arrival.day, arrival.arrived)])
        return {"success": True}
    except SeatingError as e:
        raise to_http_exception(e) from e
