from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship
from models.Base import Base

class GroupDB(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=True)
    lead_guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    lead = relationship("GuestDB")
    memberships = relationship(
        "GroupMembershipDB",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupMembershipDB.id",
    )

class GroupMembershipDB(Base):
    __tablename__ = "group_memberships"
    __table_args__ = (UniqueConstraint("group_id", "guest_id", name="uq_group_membership"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    group = relationship("GroupDB", back_populates="memberships")
    guest = relationship("GuestDB")
