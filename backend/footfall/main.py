"""
FastAPI app entrypoint.

Footfall monitoring: stores, sample ingestion with occupancy/queue metrics, alerts.
"""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from footfall.api.routes import alerts, footfall, stores
from footfall.config import settings
from footfall.core.errors import FootfallError, footfall_error_to_http

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Footfall Service", version="0.1.0")

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the production dashboard
_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
_cors_extra = settings.cors_origins or os.getenv("CORS_ORIGINS", "")
if _cors_extra:
    _cors_origins.extend(o.strip() for o in _cors_extra.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FootfallError)
async def footfall_error_handler(request: Request, exc: FootfallError):
    http_exc = footfall_error_to_http(exc)
    if http_exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"success": False, "message": http_exc.detail},
    )


app.include_router(stores.router, prefix="/api/stores", tags=["stores"])
app.include_router(footfall.router, prefix="/api/footfall", tags=["footfall"])
app.include_router(alerts.router, prefix="/api/alerts", tags=["alerts"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Footfall API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
