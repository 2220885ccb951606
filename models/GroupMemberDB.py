from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from models.Base import Base

# Named members without a guest row of their own. Kept for older clients.
class GroupMemberDB(Base):
    __tablename__ = "group_members"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    main_guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

class MemberArrivalDB(Base):
    __tablename__ = "member_arrivals"
    __table_args__ = (UniqueConstraint("member_id", "day", name="uq_member_arrival"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    member_id = Column(Integer, ForeignKey("group_members.id"), nullable=False, index=True)
    day = Column(String(3), nullable=False)
    arrived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
