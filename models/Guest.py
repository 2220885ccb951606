from typing import Optional
from pydantic import BaseModel

class Guest(BaseModel):
    name: str
    notes: str = ""
    is_ghost: bool = False
    is_manually_added: bool = False
    party_size: int = 1
    market: Optional[str] = None
    guest_type: Optional[str] = None

    class Config:
        from_attributes = True

class GuestUpdate(BaseModel):
    name: Optional[str] = None
    notes: Optional[str] = None
    is_ghost: Optional[bool] = None
    is_manually_added: Optional[bool] = None
    party_size: Optional[int] = None
    market: Optional[str] = None
    guest_type: Optional[str] = None
