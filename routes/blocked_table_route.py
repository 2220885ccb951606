import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from helper import to_http_exception
from models import *
from seating.errors import SeatingError
from seating.intents import AddBlock, RemoveBlock
from seating.store import SqlSeatingStore

logger = logging.getLogger(__name__)

blocked_table_router = APIRouter(
    tags=["BlockedTable"]
)


@blocked_table_router.get("/blocked-tables", tags=["BlockedTable"])
def get_blocked_tables(db: Session = Depends(get_db)):

    try:
        rows = db.query(BlockedTableDB).order_by(BlockedTableDB.id.asc()).all()
        return [{"table_id": row.table_id, "day": row.day, "service_id": row.service_id} for row in rows]
    except Exception as e:
        logger.exception("Get blocked tables failed")
        raise HTTPException(status_code=500, detail="Failed to fetch blocked tables") from e


@blocked_table_router.post("/blocked-tables", tags=["BlockedTable"])
def set_blocked_table(block: BlockedTable, db: Session = Depends(get_db)):
    """
    Blocks (``blocked=true``) or unblocks a table for one day and service.
    """
    try:
        if block.blocked:
            intent = AddBlock(block.table_id, block.day, block.service_id)
        else:
            intent = RemoveBlock(block.table_id, block.day, block.service_id)
        SqlSeatingStore(db).commit([intent])
        return {"success": True}
    except SeatingError as e:
        raise to_http_exception(e) from e
