import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from seating.errors import SeatingError
from seating.ledger import SeatingLedger
from seating.store import SqlSeatingStore

logger = logging.getLogger(__name__)


def get_ledger(db: Session) -> SeatingLedger:
    """Loads a ledger over the request's session."""
    return SeatingLedger.load(SqlSeatingStore(db))


def to_http_exception(error: SeatingError) -> HTTPException:
    if error.status_code >= 500:
        logger.error("Seating operation failed: %s", error.detail)
        return HTTPException(status_code=500, detail="Internal server error")
    return HTTPException(status_code=error.status_code, detail=error.detail)
