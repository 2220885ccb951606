from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func
from models.Base import Base

class GuestDB(Base):
    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    notes = Column(Text, default="")
    is_ghost = Column(Boolean, default=False, nullable=False)
    is_manually_added = Column(Boolean, default=False, nullable=False)
    # legacy headcount, group size is derived from memberships now
    party_size = Column(Integer, default=1)
    market = Column(String, nullable=True)
    guest_type = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
