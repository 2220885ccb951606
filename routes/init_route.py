import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import engine, ensure_schema, get_db
from models import *

logger = logging.getLogger(__name__)

init_router = APIRouter(
    tags=["Init"]
)

DEFAULT_TABLES = [
    {"name": "Table 1", "capacity": 8, "x": 50, "y": 50},
    {"name": "Table 2", "capacity": 8, "x": 200, "y": 50},
    {"name": "Table 3", "capacity": 6, "x": 350, "y": 50},
    {"name": "Table 4", "capacity": 6, "x": 50, "y": 200},
    {"name": "Table 5", "capacity": 10, "x": 200, "y": 200},
    {"name": "Table 6", "capacity": 10, "x": 350, "y": 200},
    {"name": "Table 7", "capacity": 4, "x": 50, "y": 350},
    {"name": "Table 8", "capacity": 4, "x": 200, "y": 350},
]


def seed_default_tables(db: Session) -> int:
    if db.query(TableDB).count() > 0:
        return 0
    for table in DEFAULT_TABLES:
        db.add(TableDB(**table))
    db.commit()
    return len(DEFAULT_TABLES)


@init_router.api_route("/init", methods=["GET", "POST"], tags=["Init"])
def init_database(db: Session = Depends(get_db)):
    """
    Creates the schema, adds columns missing from older databases and seeds
    the default floor plan when there are no tables yet. Safe to call again.
    """
    try:
        added_columns = ensure_schema(engine)
        seeded = seed_default_tables(db)
        logger.info("Database initialized, %d default tables seeded", seeded)
        return {
            "success": True,
            "message": "Database initialized successfully",
            "added_columns": added_columns,
            "seeded_tables": seeded
        }
    except Exception as e:
        db.rollback()
        logger.exception("Database initialization failed")
        raise HTTPException(status_code=500, detail="Failed to initialize database") from e
