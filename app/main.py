import logging
import time
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.api.router import api_router
from app.core.config import settings
from app.core.db import database_from_settings
from app.core.errors import AppError
from app.core.logging import setup_logging, request_id_ctx
from app.platform.provider_registry import registry

setup_logging()
app = FastAPI(title=settings.APP_NAME)

logger = logging.getLogger(__name__)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id", "-")
    request_id_ctx.set(rid)
    response = await call_next(request)
    return response

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    process_time = (time.time() - start_time) * 1000
    logger.info(
        "Request: %s %s - Response: %s - Time: %.2fms",
        request.method, request.url.path, response.status_code, process_time,
    )
    return response

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s for request %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "An internal server error occurred."},
    )

@app.on_event("startup")
async def on_startup():
    if getattr(app.state, "db", None) is None:
        app.state.db = database_from_settings()
    await app.state.db.connect()
    # provider credentials are checked lazily; a bad config only fails the first storage call
    try:
        registry.object_storage()
    except Exception:
        logger.exception("Object storage provider could not be initialised")

@app.on_event("shutdown")
async def on_shutdown():
    db = getattr(app.state, "db", None)
    if db is not None:
        await db.close()

app.include_router(api_router, prefix=settings.API_PREFIX)
