from pydantic import BaseModel, Field
from seating.keys import Day

class Arrival(BaseModel):
    guest_id: int
    day: Day
    arrived: bool = True

    class Config:
        use_enum_values = True

class Departure(BaseModel):
    guest_id: int
    day: Day
    service_id: int = Field(ge=1)

    class Config:
        use_enum_values = True

class BlockedTable(BaseModel):
    table_id: int
    day: Day
    service_id: int = Field(ge=1)
    blocked: bool = True

    class Config:
        use_enum_values = True
