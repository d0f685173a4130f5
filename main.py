"""
RewardStore - Employee Points Rewards Store
FastAPI Application Entry Point
"""
import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from contextlib import asynccontextmanager
import logging
import os
import uuid

from rewardstore.core import settings, engine, Base
from rewardstore.core.exceptions import RewardStoreError, NotAuthenticatedError
from rewardstore.api.router import api_router
import rewardstore.models  # noqa: F401  (register tables on Base.metadata)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger("rewardstore")

# Lifespan for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Create tables if not exist
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.APP_NAME} starting on port {settings.APP_PORT}")
    yield
    logger.info(f"{settings.APP_NAME} shutting down")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Employee points-for-products rewards store",
    version="1.0.0",
    lifespan=lifespan
)

# Serve uploaded images
os.makedirs(settings.UPLOAD_PATH, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_PATH), name="uploads")

# Include routers
app.include_router(api_router, prefix="/api")

# ===================== ERROR HANDLERS =====================

def _field_errors(errors) -> list:
    return [
        {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "message": err.get("msg")}
        for err in errors
    ]

@app.exception_handler(RewardStoreError)
async def rewardstore_error_handler(request: Request, exc: RewardStoreError):
    error_id = uuid.uuid4()
    if exc.status_code >= 500:
        logger.error(f"Error ID: {error_id} {request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"Error ID: {error_id} {request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")

    body = exc.to_dict()
    body["error_id"] = str(error_id)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, NotAuthenticatedError) else None
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(body), headers=headers)

@app.exception_handler(RequestValidationError)
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc):
    error_id = uuid.uuid4()
    logger.warning(f"Error ID: {error_id} {request.method} {request.url.path} -> 400 validation_failed")
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({
            "message": "Invalid data provided",
            "code": "validation_failed",
            "errors": _field_errors(exc.errors()),
            "error_id": str(error_id),
        })
    )

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    error_id = uuid.uuid4()
    logger.error(f"Error ID: {error_id} {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "message": "An unexpected error occurred",
            "code": "internal_error",
            "error_id": str(error_id),
        }
    )

# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.APP_NAME}

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.APP_PORT,
        reload=settings.DEBUG
    )
