from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship
from models.Base import Base

class TableDB(Base):
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    capacity = Column(Integer, default=6, nullable=False)
    x = Column(Integer, default=250)
    y = Column(Integer, default=200)
    created_at = Column(DateTime, server_default=func.now())

    assignments = relationship("AssignmentDB", back_populates="table", cascade="all, delete-orphan")
    blocks = relationship("BlockedTableDB", back_populates="table", cascade="all, delete-orphan")
