import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from models import *

logger = logging.getLogger(__name__)

group_router = APIRouter(
    tags=["Group"]
)


def _group_to_dict(group: GroupDB) -> dict:
    return {
        "id": group.id,
        "name": group.name,
        "lead_guest_id": group.lead_guest_id,
        "lead_guest_name": group.lead.name if group.lead else None,
        "lead_is_ghost": bool(group.lead.is_ghost) if group.lead else False,
        "members": [
            {
                "id": m.id,
                "guest_id": m.guest_id,
                "guest_name": m.guest.name if m.guest else None,
                "is_ghost": bool(m.guest.is_ghost) if m.guest else False
            }
            for m in group.memberships
        ]
    }


@group_router.get("/groups", tags=["Group"])
def get_groups(db: Session = Depends(get_db)):
    """
    Retrieves all groups with their lead guest and members, newest first.
    """
    try:
        groups = db.query(GroupDB).order_by(GroupDB.created_at.desc(), GroupDB.id.desc()).all()
        return [_group_to_dict(group) for group in groups]
    except Exception as e:
        logger.exception("Get groups failed")
        raise HTTPException(status_code=500, detail="Failed to fetch groups") from e


@group_router.post("/groups", tags=["Group"])
def create_group(group: Group, db: Session = Depends(get_db)):

    if not group.lead_guest_id:
        raise HTTPException(status_code=400, detail="Lead guest ID required")
    try:
        if not db.query(GuestDB).filter(GuestDB.id == group.lead_guest_id).first():
            raise HTTPException(status_code=404, detail="Guest not found")

        db_group = GroupDB(name=group.name or None, lead_guest_id=group.lead_guest_id)
        db.add(db_group)
        db.commit()
        db.refresh(db_group)
        return _group_to_dict(db_group)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Create group failed")
        raise HTTPException(status_code=500, detail="Failed to create group") from e


@group_router.put("/groups/{id}", tags=["Group"])
def update_group(id: int, updated_group: GroupUpdate, db: Session = Depends(get_db)):
    """
    Renames a group or hands its lead to another guest. A name sent as null
    or empty clears it.
    """
    try:
        db_group = db.query(GroupDB).filter(GroupDB.id == id).first()
        if not db_group:
            raise HTTPException(status_code=404, detail="Group not found")

        changes = updated_group.model_dump(exclude_unset=True)
        if "name" in changes:
            db_group.name = changes["name"] or None

        lead_guest_id = changes.get("lead_guest_id")
        if lead_guest_id:
            if not db.query(GuestDB).filter(GuestDB.id == lead_guest_id).first():
                raise HTTPException(status_code=404, detail="Guest not found")
            if any(m.guest_id == lead_guest_id for m in db_group.memberships):
                raise HTTPException(status_code=400, detail="Cannot add lead guest as a member")
            db_group.lead_guest_id = lead_guest_id

        db.commit()
        db.refresh(db_group)
        return {"success": True, "group": _group_to_dict(db_group)}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Update group %s failed", id)
        raise HTTPException(status_code=500, detail="Failed to update group") from e


@group_router.delete("/groups/{id}", tags=["Group"])
def delete_group(id: int, db: Session = Depends(get_db)):

    try:
        db_group = db.query(GroupDB).filter(GroupDB.id == id).first()
        if not db_group:
            raise HTTPException(status_code=404, detail="Group not found")

        # memberships go with the group
        db.delete(db_group)
        db.commit()
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Delete group %s failed", id)
        raise HTTPException(status_code=500, detail="Failed to delete group") from e


@group_router.post("/group-memberships", tags=["Group"])
def add_group_membership(membership: GroupMembership, db: Session = Depends(get_db)):
    """
    Adds a guest to a group. The lead cannot be a member of its own group and
    nobody can be added twice.
    """
    if not membership.group_id or not membership.guest_id:
        raise HTTPException(status_code=400, detail="Group ID and Guest ID required")
    try:
        db_group = db.query(GroupDB).filter(GroupDB.id == membership.group_id).first()
        if not db_group:
            raise HTTPException(status_code=404, detail="Group not found")
        guest = db.query(GuestDB).filter(GuestDB.id == membership.guest_id).first()
        if not guest:
            raise HTTPException(status_code=404, detail="Guest not found")

        existing = db.query(GroupMembershipDB).filter(
            GroupMembershipDB.group_id == membership.group_id,
            GroupMembershipDB.guest_id == membership.guest_id
        ).first()
        if existing:
            raise HTTPException(status_code=400, detail="Guest is already a member of this group")
        if db_group.lead_guest_id == membership.guest_id:
            raise HTTPException(status_code=400, detail="Cannot add lead guest as a member")

        db_membership = GroupMembershipDB(group_id=membership.group_id, guest_id=membership.guest_id)
        db.add(db_membership)
        db.commit()
        db.refresh(db_membership)
        return {
            "id": db_membership.id,
            "group_id": db_membership.group_id,
            "guest_id": db_membership.guest_id,
            "guest_name": guest.name,
            "is_ghost": bool(guest.is_ghost)
        }
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Add group membership failed")
        raise HTTPException(status_code=500, detail="Failed to add member to group") from e


@group_router.delete("/group-memberships", tags=["Group"])
def remove_group_membership(
    id: Optional[int] = Query(None),
    group_id: Optional[int] = Query(None),
    guest_id: Optional[int] = Query(None),
    db: Session = Depends(get_db)
):
    """
    Removes a member either by membership id or by group and guest id.
    """
    query = db.query(GroupMembershipDB)
    if id:
        query = query.filter(GroupMembershipDB.id == id)
    elif group_id and guest_id:
        query = query.filter(GroupMembershipDB.group_id == group_id, GroupMembershipDB.guest_id == guest_id)
    else:
        raise HTTPException(status_code=400, detail="Membership ID or Group+Guest IDs required")

    try:
        query.delete(synchronize_session=False)
        db.commit()
        return {"success": True}
    except Exception as e:
        db.rollback()
        logger.exception("Remove group membership failed")
        raise HTTPException(status_code=500, detail="Failed to remove member from group") from e
