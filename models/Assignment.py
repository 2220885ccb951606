from typing import Optional
from pydantic import BaseModel, Field
from seating.keys import Day

class Assignment(BaseModel):
    guest_id: int
    table_id: int
    day: Day
    service_id: int = Field(ge=1)
    seats: int = Field(default=1, ge=1)
    party_size_override: Optional[int] = None

    class Config:
        from_attributes = True
        use_enum_values = True
