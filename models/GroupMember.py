from typing import Optional
from pydantic import BaseModel
from seating.keys import Day

class GroupMember(BaseModel):
    main_guest_id: Optional[int] = None
    name: Optional[str] = None

class MemberArrival(BaseModel):
    member_id: int
    day: Day
    arrived: bool = True

    class Config:
        use_enum_values = True
