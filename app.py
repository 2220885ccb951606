import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from routes.arrival_route import arrival_router
from routes.assignment_route import assignment_router
from routes.blocked_table_route import blocked_table_router
from routes.departure_route import departure_router
from routes.group_member_route import group_member_router
from routes.group_route import group_router
from routes.guest_route import guest_router
from routes.init_route import init_router
from routes.ledger_route import ledger_router
from routes.sms_route import sms_router
from routes.table_route import table_router

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Seating Ledger")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(init_router)
app.include_router(guest_router)
app.include_router(table_router)
app.include_router(group_router)
app.include_router(group_member_router)
app.include_router(assignment_router)
app.include_router(arrival_router)
app.include_router(departure_router)
app.include_router(blocked_table_router)
app.include_router(ledger_router)
app.include_router(sms_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or incomplete request bodies are reported as 400."""
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content=jsonable_encoder({"detail": exc.errors()}))


@app.get("/")
async def base_path():
    """
    Root endpoint to verify that the API is running.

    Returns:
        dict: A success message.
    """
    return {"success": True}
