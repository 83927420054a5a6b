"""
main.py – FastAPI application entry point.

Endpoints
---------
GET  /          – service banner
GET  /health    – liveness / readiness probe with version info
POST /analyze   – upload CSV, run ring / fan / velocity detection, return JSON

Production concerns addressed
------------------------------
- Structured logging (INFO level, JSON-friendly format)
- File-size guard before parsing the upload
- Request-ID header injected into every response for traceability
- parse_stats returned so callers know about dropped rows / warnings
- Cycle enumeration capped at MAX_RINGS; denser graphs rejected with 422
- Analysis runs in the threadpool so other requests keep being served
- Unexpected failures reported as a generic 500, details only in the log
- Upload spool always closed, whatever the outcome
- CORS locked to env-configurable origins
"""
from __future__ import annotations

import logging
import time
import uuid

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, UploadFile, File, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS, MAX_FILE_SIZE_BYTES, MAX_RINGS, MAX_ROWS
from .parser import parse_csv
from .engine import analyze_transactions
from .cycle_detector import RingLimitExceeded
from .graph_builder import to_networkx
from .formatter import format_output
from .models import AnalysisResult

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s │ %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("Ringwatch v%s starting up", __version__)
    yield
    log.info("Ringwatch shutting down")


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Ringwatch",
    description="Flag money-muling accounts from transfer cycles, fan patterns and velocity",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request-ID middleware
# ---------------------------------------------------------------------------
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/", include_in_schema=False)
def root():
    return {"status": "ok", "service": "Ringwatch", "version": __version__}


@app.get("/health")
def health():
    """Liveness / readiness probe."""
    return {
        "status": "healthy",
        "version": __version__,
        "max_file_size_mb": MAX_FILE_SIZE_BYTES // (1024 * 1024),
        "max_rows": MAX_ROWS,
    }


def _run_analysis(transactions, parse_stats, start_time, detail, max_rings):
    analysis = analyze_transactions(transactions, max_rings=max_rings)
    G = to_networkx(analysis["graph"])
    elapsed = time.perf_counter() - start_time
    return format_output(analysis, G, elapsed, parse_stats, include_graph=detail)


@app.post("/analyze", response_model=AnalysisResult, response_model_exclude_none=True)
async def analyze(
    file: UploadFile = File(...),
    detail: bool = Query(False, description="Include graph nodes and edges"),
):
    """
    Upload a CSV of transfers and receive the suspicious-account report.

    Required CSV columns: sender_id, receiver_id (aliases accepted).
    """
    try:
        # ---- basic validation ----
        if not (file.filename or "").lower().endswith(".csv"):
            raise HTTPException(status_code=400, detail="Only CSV files are accepted.")

        file_bytes = await file.read()

        if len(file_bytes) > MAX_FILE_SIZE_BYTES:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum size is {MAX_FILE_SIZE_BYTES // (1024*1024)} MB.",
            )

        start_time = time.perf_counter()

        # ---- 1. Parse (CPU bound work runs off the event loop) ----
        try:
            transactions, parse_stats = await run_in_threadpool(parse_csv, file_bytes)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc))

        if parse_stats.get("warnings"):
            log.warning("Parse warnings for %s: %s", file.filename, parse_stats["warnings"])

        # ---- 2. Detect & score ----
        try:
            result = await run_in_threadpool(
                _run_analysis, transactions, parse_stats, start_time, detail, MAX_RINGS
            )
        except RingLimitExceeded as exc:
            raise HTTPException(
                status_code=422,
                detail=f"Transaction graph too dense to analyse: {exc}",
            )
        except Exception:
            log.exception("Analysis failed for %s", file.filename)
            raise HTTPException(
                status_code=500,
                detail="Internal error while analysing transactions.",
            )
    finally:
        await file.close()

    log.info(
        "Analysis complete for %s in %.2fs: %d rings, %d flagged accounts",
        file.filename,
        result["summary"]["processing_time_seconds"],
        result["summary"]["fraud_rings_detected"],
        result["summary"]["suspicious_accounts_flagged"],
    )
    return result
