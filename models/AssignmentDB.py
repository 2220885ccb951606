from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship
from models.Base import Base

class AssignmentDB(Base):
    __tablename__ = "assignments"
    __table_args__ = (
        UniqueConstraint("guest_id", "table_id", "day", "service_id", name="uq_assignment_slot"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False, index=True)
    table_id = Column(Integer, ForeignKey("tables.id"), nullable=False, index=True)
    day = Column(String(3), nullable=False)
    service_id = Column(Integer, nullable=False)
    seats = Column(Integer, default=1, nullable=False)
    party_size_override = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    table = relationship("TableDB", back_populates="assignments")
