from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship
from models.Base import Base

class ArrivalDB(Base):
    __tablename__ = "arrivals"
    __table_args__ = (UniqueConstraint("guest_id", "day", name="uq_arrival"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False, index=True)
    day = Column(String(3), nullable=False)
    arrived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

class DepartureDB(Base):
    __tablename__ = "departures"
    __table_args__ = (UniqueConstraint("guest_id", "day", "service_id", name="uq_departure"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=False, index=True)
    day = Column(String(3), nullable=False)
    service_id = Column(Integer, nullable=False)
    departed_at = Column(DateTime, server_default=func.now())

class BlockedTableDB(Base):
    __tablename__ = "blocked_tables"
    __table_args__ = (UniqueConstraint("table_id", "day", "service_id", name="uq_blocked_table"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    table_id = Column(Integer, ForeignKey("tables.id"), nullable=False, index=True)
    day = Column(String(3), nullable=False)
    service_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    table = relationship("TableDB", back_populates="blocks")
