"""
FastAPI application for the BPMN diff service.

Exposes the comparison engine over HTTP for upload front-ends.
"""

import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from bpmn_diff import __version__
from bpmn_diff.api.routes import router as comparison_router
from bpmn_diff.core.errors import ComparisonError

app = FastAPI(
    title="BPMN Diff API",
    description="Semantic comparison of two BPMN 2.0 process definitions",
    version=__version__,
)

# Upload front-ends are served from their own origin
allowed_origins = [
    origin.strip()
    for origin in os.getenv("BPMN_DIFF_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(comparison_router)


@app.exception_handler(ComparisonError)
async def comparison_error_handler(request: Request, exc: ComparisonError) -> JSONResponse:
    """Malformed or non-BPMN uploads are client errors."""
    logger.info(f"Rejected comparison request: {exc}")
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "BPMN Diff API",
        "version": __version__,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
