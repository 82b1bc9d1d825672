"""
HTML to PDF API - FastAPI application.

Provides endpoints for converting HTML strings, uploaded HTML files and
remote URLs to PDF using Playwright/Chromium.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from io import BytesIO
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import SERVICE_NAME, ApiSettings, get_settings, validate_config_on_startup
from .converter import convert
from .errors import ConversionError, InvalidRequest, describe_validation_errors
from .options import RenderOptionsOverrides, describe_options, parse_overrides
from .sources import FileInput, HtmlInput, UrlInput
from .uploads import is_html_upload, store_upload

_settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, _settings.log_level),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

PDF_FILENAME = "converted.pdf"

app = FastAPI(
    title=SERVICE_NAME,
    version=__version__,
    description="Convert HTML strings, HTML files and URLs to PDF using Playwright/Chromium"
)

if _settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )


_render_limiter: Optional[asyncio.Semaphore] = None


async def get_render_limiter(
    settings: ApiSettings = Depends(get_settings),
) -> Optional[asyncio.Semaphore]:
    """
    Semaphore bounding concurrent renders, or None when unbounded.

    Runs on the event loop, so the first request creates the one shared
    semaphore without racing other requests.
    """
    global _render_limiter
    if not settings.max_concurrent_renders:
        return None
    if _render_limiter is None:
        _render_limiter = asyncio.Semaphore(settings.max_concurrent_renders)
    return _render_limiter


@app.on_event("startup")
async def prepare_on_startup():
    """Log configuration and make sure the upload directory exists."""
    settings = get_settings()
    validate_config_on_startup(settings)
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"{SERVICE_NAME} ready on port {settings.port}")


# ============================================================================
# Request/Response Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "OK"
    timestamp: datetime
    service: str = SERVICE_NAME


class ConvertStringRequest(BaseModel):
    """HTML string to PDF request."""
    html: Optional[str] = Field(None, description="HTML content to render")
    options: Optional[RenderOptionsOverrides] = Field(None, description="Render options")


class ConvertUrlRequest(BaseModel):
    """URL to PDF request."""
    url: Optional[str] = Field(None, description="URL of the page to render")
    options: Optional[RenderOptionsOverrides] = Field(None, description="Render options")


def _pdf_response(pdf_bytes: bytes) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{PDF_FILENAME}"',
            "Content-Length": str(len(pdf_bytes)),
        }
    )


def _parse_options_field(raw: Optional[str]) -> Optional[RenderOptionsOverrides]:
    """Options arrive as a JSON string in multipart requests."""
    if raw is None or not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidRequest(f"options must be valid JSON: {e.msg}")
    return parse_overrides(data)


# ============================================================================
# Discovery Endpoints
# ============================================================================

@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check. Performs no rendering."""
    return HealthResponse(timestamp=datetime.now(timezone.utc))


@app.get("/api/options")
async def get_options():
    """Valid formats and orientations, plus the full default options."""
    return describe_options()


# ============================================================================
# PDF Conversion Endpoints
# ============================================================================

@app.post("/api/convert/string")
async def convert_string(
    request: ConvertStringRequest,
    settings: ApiSettings = Depends(get_settings),
    limiter: Optional[asyncio.Semaphore] = Depends(get_render_limiter),
):
    """
    Convert an HTML string to PDF.

    Returns:
        StreamingResponse with PDF binary data

    Raises:
        InvalidRequest: 400 when html is missing
        RenderFailed: 500 for rendering failures
    """
    if not request.html or not request.html.strip():
        raise InvalidRequest("HTML content is required")

    pdf_bytes = await convert(
        HtmlInput(request.html),
        request.options,
        headless=settings.playwright_headless,
        limiter=limiter,
    )
    return _pdf_response(pdf_bytes)


@app.post("/api/convert/file")
async def convert_file(
    htmlFile: Optional[UploadFile] = File(None, description="HTML file (.html or text/html)"),
    options: Optional[str] = Form(None, description="Render options as a JSON string"),
    settings: ApiSettings = Depends(get_settings),
    limiter: Optional[asyncio.Semaphore] = Depends(get_render_limiter),
):
    """
    Convert an uploaded HTML file to PDF.

    The upload is checked before it is stored, and the stored copy is
    deleted as soon as it has been read.

    Raises:
        InvalidRequest: 400 when the file is missing, not HTML, or options are malformed
        UploadTooLarge: 413 when the file exceeds the upload limit
        RenderFailed: 500 for rendering failures
    """
    if htmlFile is None:
        raise InvalidRequest("HTML file is required")

    if not is_html_upload(htmlFile):
        logger.warning(
            f"Rejected upload {htmlFile.filename!r} (content_type={htmlFile.content_type})"
        )
        await htmlFile.close()
        raise InvalidRequest("Only HTML files are allowed!")

    try:
        overrides = _parse_options_field(options)
    except InvalidRequest:
        await htmlFile.close()
        raise

    stored = await store_upload(htmlFile, settings.upload_dir, settings.max_upload_bytes)
    pdf_bytes = await convert(
        FileInput(stored, remove_after_read=True),
        overrides,
        headless=settings.playwright_headless,
        limiter=limiter,
    )
    return _pdf_response(pdf_bytes)


@app.post("/api/convert/url")
async def convert_url(
    request: ConvertUrlRequest,
    settings: ApiSettings = Depends(get_settings),
    limiter: Optional[asyncio.Semaphore] = Depends(get_render_limiter),
):
    """
    Convert a remote URL to PDF.

    The URL is handed to the browser as-is; unreachable or malformed URLs
    surface as rendering failures.
    """
    if not request.url or not request.url.strip():
        raise InvalidRequest("URL is required")

    pdf_bytes = await convert(
        UrlInput(request.url.strip()),
        request.options,
        headless=settings.playwright_headless,
        limiter=limiter,
    )
    return _pdf_response(pdf_bytes)


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(ConversionError)
async def conversion_error_handler(request: Request, exc: ConversionError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"Conversion error on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"Rejected request to {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_validation_errors(exc.errors())
    logger.warning(f"Invalid request to {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"API Error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc) or type(exc).__name__})
