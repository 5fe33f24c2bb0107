"""
Observation Engine API — Main Application

POST /observations/classify                  — Grade one observation line
POST /observations/submission                — Grade a multi-line submission
POST /observations/decoy-check               — Check for verbs absent from a passage
GET  /packs                                  — List bundled verse packs
GET  /packs/{pack_id}/levels/{level_id}      — One level with verbs and decoys
POST /packs/{pack_id}/levels/{level_id}/submit — Score a submission for a level
GET  /rules                                  — List the frozen rule set
GET  /health                                 — Health check
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from observation_engine import __version__
from observation_engine.config import settings
from observation_engine.registry import REGISTRY_VERSION, Tier, default_registry
from observation_engine.classifier import classify_line
from observation_engine.scorer import classify_submission
from observation_engine.decoy import check_decoy_verb
from observation_engine.levels import ALL_PACKS, get_level, score_level_submission
from observation_engine.logging import setup_logging, get_logger
from observation_engine.schemas.observation import (
    ClassifyRequest,
    ClassificationResponse,
    SubmissionRequest,
    AggregateResponse,
    DecoyCheckRequest,
    DecoyCheckResponse,
    LevelSubmitRequest,
    LevelSubmitResponse,
    LevelResponse,
    PacksResponse,
    RulesResponse,
    HealthResponse,
)

logger = get_logger("api")


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Observation API starting",
                extra={"registry_version": REGISTRY_VERSION})
    yield
    logger.info("Observation API shutting down")


app = FastAPI(
    title="Observation Engine API",
    description="Rule-based interpretation detection for passage observations",
    version=f"{__version__} (registry {REGISTRY_VERSION})",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=False,
)


# ============================================================
# GLOBAL ERROR HANDLER
# ============================================================

@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions — return structured error, don't leak internals."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={"error": str(exc), "error_type": type(exc).__name__,
               "path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. The observation could not be scored."},
    )


def _level_or_404(pack_id: str, level_id: int):
    level = get_level(pack_id, level_id)
    if level is None:
        raise HTTPException(404, f"Unknown level: {pack_id}/{level_id}")
    return level


# ============================================================
# ROUTES
# ============================================================

@app.post("/observations/classify", response_model=ClassificationResponse)
async def classify(request: ClassifyRequest):
    """Grade a single observation line."""
    result = classify_line(request.text)
    return result.to_dict()


@app.post("/observations/submission", response_model=AggregateResponse)
async def classify_many(request: SubmissionRequest):
    """Grade every non-blank line of a submission."""
    result = classify_submission(request.text)
    logger.info(
        f"Submission scored: total={result.total_points}",
        extra={
            "total_points": result.total_points,
            "line_count": len(result.per_line),
            "valid_count": result.valid_count,
            "penalty_count": result.penalty_count,
        },
    )
    return result.to_dict()


@app.post("/observations/decoy-check", response_model=DecoyCheckResponse)
async def decoy_check(request: DecoyCheckRequest):
    """Report the first decoy verb the observation references, if any."""
    match = check_decoy_verb(
        request.observation, request.actual_verbs, request.decoy_verbs,
    )
    if match is None:
        return {"is_decoy": False, "verb": None}
    return match.to_dict()


@app.get("/packs", response_model=PacksResponse)
async def list_packs():
    packs = [p.summary() for p in ALL_PACKS]
    return {"packs": packs, "total": len(packs)}


@app.get("/packs/{pack_id}/levels/{level_id}", response_model=LevelResponse)
async def read_level(pack_id: str, level_id: int):
    return _level_or_404(pack_id, level_id).to_dict()


@app.post(
    "/packs/{pack_id}/levels/{level_id}/submit",
    response_model=LevelSubmitResponse,
)
async def submit_level(pack_id: str, level_id: int, request: LevelSubmitRequest):
    """Score a submission for one level, applying the decoy-verb override."""
    level = _level_or_404(pack_id, level_id)
    result = score_level_submission(
        request.text, level, starting_score=request.starting_score,
    )
    logger.info(
        f"Level submission scored: {pack_id}/{level_id} score={result.final_score}",
        extra={
            "pack_id": pack_id,
            "level_id": level_id,
            "total_points": result.total_points,
            "line_count": len(result.per_line),
            "penalty_count": result.penalty_count,
        },
    )
    return {"pack_id": pack_id, "level_id": level_id, **result.to_dict()}


@app.get("/rules", response_model=RulesResponse)
async def list_rules(
    tier: Optional[str] = Query(
        None, pattern="^(hard_trigger|soft_trigger|bonus_pattern)$",
    ),
):
    """Return the frozen rule set in evaluation order."""
    rules = default_registry.describe(Tier(tier) if tier else None)
    return {
        "registry_version": REGISTRY_VERSION,
        "total_rules": len(rules),
        "rules": rules,
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    return {
        "status": "operational",
        "version": __version__,
        "registry_version": REGISTRY_VERSION,
        "rule_count": len(default_registry),
        "pack_count": len(ALL_PACKS),
    }


# --- Version Headers Middleware ---
@app.middleware("http")
async def add_version_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Observation-Engine-Version"] = __version__
    response.headers["X-Registry-Version"] = REGISTRY_VERSION
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


# --- Request Logging Middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with method, path, status, duration."""
    path = request.url.path
    if path == "/health":
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 1)

    logger.info(
        f"{request.method} {path} → {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
