from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from seating.groups import AssignScope
from seating.keys import Day

class SlotRequest(BaseModel):
    day: Day
    service_id: int = Field(ge=1)

    class Config:
        use_enum_values = True

class AssignGuestRequest(SlotRequest):
    guest_id: int
    table_id: int
    group_id: Optional[int] = None
    scope: Optional[AssignScope] = None

class MoveRequest(SlotRequest):
    guest_id: int
    from_table_id: int
    to_table_id: int

class MoveGroupRequest(SlotRequest):
    lead_guest_id: int
    group_id: int
    to_table_id: int

class MoveGuestsRequest(SlotRequest):
    guest_ids: List[int]
    from_table_id: int
    to_table_id: int

class SeatAllocation(BaseModel):
    table_id: int
    seats: int

class SplitRequest(SlotRequest):
    guest_id: int
    allocations: List[SeatAllocation]

class SplitByMemberRequest(SlotRequest):
    group_id: int
    member_tables: Dict[int, Optional[int]]

class ToggleArrivalRequest(BaseModel):
    guest_id: int
    day: Day

    class Config:
        use_enum_values = True

class ToggleDepartureRequest(SlotRequest):
    guest_id: int

class ToggleBlockRequest(SlotRequest):
    table_id: int

class ToggleMemberArrivalRequest(BaseModel):
    member_id: int
    day: Day

    class Config:
        use_enum_values = True

class ToggleGhostRequest(BaseModel):
    guest_id: int

class CommitRequest(BaseModel):
    intents: List[dict]
