from typing import Optional
from pydantic import BaseModel, Field

class Table(BaseModel):
    name: str
    capacity: int = Field(default=6, ge=0)
    x: int = 250
    y: int = 200

    class Config:
        from_attributes = True

class TableUpdate(BaseModel):
    name: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    x: Optional[int] = None
    y: Optional[int] = None
