"""TopCodes microservice -- FastAPI application.

Endpoints:
    POST /scan       -- Scan an uploaded image for TopCodes
    POST /threshold  -- Return the thresholded image (PNG or plain PPM)
    GET  /health     -- Health check
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from pydantic import BaseModel, Field

from .renderer import render_png, render_ppm
from .scanner import Scanner, load_rgb

structlog.configure(
    processors=[
        structlog.dev.ConsoleRenderer(),
    ],
)

logger = structlog.get_logger(__name__)

VERSION = "0.1.0"

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

SUPPORTED_CONTENT_TYPES = ("image/png", "image/jpeg", "image/webp")

app = FastAPI(
    title="topcodes",
    description="TopCode fiducial marker scanner",
    version=VERSION,
)


# --------------------------------------------------------------------------
# Response models
# --------------------------------------------------------------------------


class SymbolResponse(BaseModel):
    """A decoded TopCode."""

    code: int = Field(description="Canonical 13-bit symbol code")
    x: float = Field(description="Horizontal center in pixels")
    y: float = Field(description="Vertical center in pixels")
    unit: float = Field(description="Ring width in pixels")
    orientation: float = Field(description="Orientation in radians")
    radius: float = Field(description="Symbol radius in pixels (4 units)")


class ScanResponse(BaseModel):
    """Response body for /scan."""

    width: int
    height: int
    count: int = Field(description="Number of symbols found")
    symbols: list[SymbolResponse] = Field(
        default_factory=list,
        description="Symbols in scan discovery order (top to bottom)",
    )


class HealthResponse(BaseModel):
    """Response body for /health."""

    status: str
    service: str
    version: str


# --------------------------------------------------------------------------
# Helpers
# --------------------------------------------------------------------------


async def _load_scanner(file: UploadFile, max_diameter: float | None) -> Scanner:
    if file.content_type and file.content_type not in SUPPORTED_CONTENT_TYPES:
        raise HTTPException(
            status_code=422,
            detail=(f"Unsupported image type: {file.content_type}. " "Use PNG, JPEG, or WebP."),
        )

    image_bytes = await file.read()
    if len(image_bytes) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Image too large (max 10MB)")

    try:
        buffer, width, height = await run_in_threadpool(load_rgb, image_bytes)
        scanner = Scanner(buffer, width, height)
        if max_diameter is not None:
            scanner.set_max_code_diameter(max_diameter)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return scanner


# --------------------------------------------------------------------------
# Endpoints
# --------------------------------------------------------------------------


@app.post("/scan", response_model=ScanResponse)
async def scan_endpoint(
    file: UploadFile = File(...),
    max_diameter: float | None = Query(
        default=None,
        gt=0,
        le=4096,
        description="Largest symbol diameter in pixels",
    ),
) -> ScanResponse:
    """Scan an image for TopCodes."""
    scanner = await _load_scanner(file, max_diameter)

    try:
        symbols = await run_in_threadpool(scanner.scan)
    except Exception as e:
        logger.error("scan_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Scan failed")

    return ScanResponse(
        width=scanner.width,
        height=scanner.height,
        count=len(symbols),
        symbols=[SymbolResponse(**symbol.to_dict()) for symbol in symbols],
    )


@app.post(
    "/threshold",
    response_class=Response,
    responses={
        200: {
            "content": {"image/png": {}, "image/x-portable-pixmap": {}},
            "description": "Thresholded image",
        },
        422: {"description": "Invalid input"},
    },
)
async def threshold_endpoint(
    file: UploadFile = File(...),
    format: str = Query(default="png", pattern="^(png|ppm)$"),
    show_candidates: bool = Query(default=False),
) -> Response:
    """Return the thresholded image used by the scanner."""
    scanner = await _load_scanner(file, None)

    try:
        await run_in_threadpool(scanner.scan)
        if format == "ppm":
            content = render_ppm(scanner.thresholded).encode("ascii")
            media_type = "image/x-portable-pixmap"
        else:
            content = await run_in_threadpool(
                render_png, scanner.thresholded, show_candidates=show_candidates
            )
            media_type = "image/png"
    except Exception as e:
        logger.error("threshold_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Thresholding failed")

    return Response(content=content, media_type=media_type)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint for Docker and load balancer probes."""
    return HealthResponse(
        status="healthy",
        service="topcodes",
        version=VERSION,
    )
