import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import connect, creators, payments, payouts, subscriptions, webhooks
from app.core.config import settings
from app.core.errors import GatewayError, SettlementError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Creator Payments API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SettlementError)
async def settlement_error_handler(request: Request, exc: SettlementError):
    """Domain errors carry their own status code and a client-safe message"""
    if isinstance(exc, GatewayError):
        logger.error(f"[GATEWAY] {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    missing = any(err.get("type") == "missing" for err in exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "Missing required fields" if missing else "Invalid request"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(payments.router, prefix="/payments", tags=["payments"])
app.include_router(payouts.router, prefix="/payouts", tags=["payouts"])
app.include_router(creators.router, prefix="/creators", tags=["creators"])
app.include_router(subscriptions.router, prefix="/subscriptions", tags=["subscriptions"])
app.include_router(connect.router, prefix="/stripe", tags=["stripe"])
app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])


@app.get("/")
async def root():
    return {"message": "Creator Payments API", "version": "1.0.0"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
