from typing import Optional
from pydantic import BaseModel

class Group(BaseModel):
    lead_guest_id: Optional[int] = None
    name: Optional[str] = None

class GroupUpdate(BaseModel):
    name: Optional[str] = None
    lead_guest_id: Optional[int] = None

class GroupMembership(BaseModel):
    group_id: Optional[int] = None
    guest_id: Optional[int] = None
