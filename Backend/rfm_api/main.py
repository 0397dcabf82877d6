# main.py
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from rfm_api.config import CORS_ORIGINS
from rfm_api.database import create_pool, init_db, ping
from rfm_api.routers import auth_router, users_router

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        init_db(app.state.pool)
    except Exception:
        logger.exception("Database bootstrap failed; continuing without it")
    yield
    app.state.pool.dispose()
    logger.info("Database connection pool closed")


app = FastAPI(title="RFM Backend API", version="1.0.0", description="RFM apparel admin API", lifespan=lifespan)

# One bounded pool per process; handlers borrow from it via rfm_api.database.get_connection
app.state.pool = create_pool()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(users_router.router)
app.include_router(auth_router.router)


# Exception handlers to return uniform error shape
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    # exc.detail may be dict or str
    msg = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(content={"success": False, "message": msg or "Error", "data": {}}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    msg = f"Invalid {field}: {first.get('msg')}" if field else "Invalid request"
    return JSONResponse(content={"success": False, "message": msg, "data": {}}, status_code=400)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(content={"success": False, "message": "Internal server error", "data": {}}, status_code=500)


@app.get("/")
def root():
    return {"message": "RFM Backend API is running"}


@app.get("/api/health")
def health_check(request: Request):
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        connection = request.app.state.pool.connect()
        try:
            healthy = ping(connection)
        finally:
            connection.close()
    except Exception as e:
        logger.warning("Database health check failed: %s", e)
        return JSONResponse(
            status_code=500,
            content={
                "status": "ERROR",
                "message": "Backend server health check failed",
                "timestamp": timestamp,
                "database": {"success": False, "message": "Database connection failed", "error": str(e)},
            },
        )

    return {
        "status": "OK" if healthy else "ERROR",
        "message": "Server is running",
        "timestamp": timestamp,
        "database": {"success": healthy, "message": "Database connection is healthy" if healthy else "Unexpected ping result"},
    }
