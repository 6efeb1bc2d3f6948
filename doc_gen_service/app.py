"""
Doc Gen Service - FastAPI application for pay transparency reports.

Renders report data to paginated HTML or PDF using Jinja2 templates and
Playwright/Chromium.
"""

import asyncio
import logging
from dataclasses import asdict
from datetime import datetime
from io import BytesIO
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, StreamingResponse

from . import __version__
from .auth import verify_api_key
from .config import settings, validate_config_on_startup
from .errors import TemplateRenderError
from .models import HealthResponse, ReportFormat, SubmittedReportData
from .rate_limiter import ClientRateLimiter, RateLimitExceededError
from .service import generate_report

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Doc Gen Service",
    version=__version__,
    description="Pay transparency report generation using Playwright/Chromium"
)

MAX_CONCURRENT_REPORTS = settings.max_concurrent_reports

# Semaphore for concurrency limiting
_report_semaphore = asyncio.Semaphore(MAX_CONCURRENT_REPORTS)

# Per-client request limiting (None when disabled)
_rate_limiter: Optional[ClientRateLimiter] = (
    ClientRateLimiter(settings.rate_limit_window_ms, settings.rate_limit_limit)
    if settings.rate_limit_enabled
    else None
)

# Browser readiness state
_browser_ready = False
_browser_error: Optional[str] = None


# ============================================================================
# Startup Event - Validate configuration and Chromium
# ============================================================================

@app.on_event("startup")
async def validate_on_startup():
    """
    Validate configuration, then Playwright/Chromium outside local environments.

    The service won't report as healthy if Chromium can't actually render.
    """
    global _browser_ready, _browser_error

    validate_config_on_startup()

    if settings.is_local:
        logger.info("Local environment - skipping Chromium validation")
        _browser_ready = True
        return

    logger.info("Doc Gen Service starting - validating Playwright installation...")

    try:
        from playwright.async_api import async_playwright

        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=settings.playwright_headless)
            page = await browser.new_page()

            await page.set_content("<html><body><h1>Test</h1></body></html>")
            test_pdf = await page.pdf(
                width=f"{settings.page_width_px}px",
                height=f"{settings.page_height_px}px",
            )

            await browser.close()

            if len(test_pdf) > 0:
                _browser_ready = True
                logger.info(f"Playwright validation successful - generated {len(test_pdf)} byte test PDF")
            else:
                _browser_error = "Test PDF generation returned empty result"
                logger.error(f"Playwright validation failed: {_browser_error}")

    except Exception as e:
        _browser_error = str(e)
        logger.error(f"Playwright validation failed: {_browser_error}")
        logger.error("Report generation will not work until this is resolved.")


# ============================================================================
# Dependencies
# ============================================================================

def enforce_rate_limit(request: Request) -> None:
    """
    Reject clients that exceeded their request allowance.

    Raises:
        HTTPException: 429 with Retry-After when rate limited
    """
    if _rate_limiter is None:
        return

    client = request.client.host if request.client else "unknown"
    try:
        _rate_limiter.acquire(client)
    except RateLimitExceededError as e:
        logger.warning(str(e))
        raise HTTPException(
            status_code=429,
            detail="Too many requests, please try again later.",
            headers={"Retry-After": str(int(e.retry_after) + 1)}
        )


# ============================================================================
# Health Check Endpoint
# ============================================================================

@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint for container orchestration.

    Returns service status, capacity information, browser readiness and,
    when rate limiting is enabled, limiter statistics.
    Returns HTTP 503 if Chromium validation failed on startup.
    """
    if not _browser_ready:
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "timestamp": datetime.utcnow().isoformat(),
                "active_reports": MAX_CONCURRENT_REPORTS - _report_semaphore._value,
                "max_concurrent": MAX_CONCURRENT_REPORTS,
                "browser_ready": False,
                "browser_error": _browser_error,
                "message": "Doc gen service is unhealthy - Playwright/Chromium not available"
            }
        )

    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        active_reports=MAX_CONCURRENT_REPORTS - _report_semaphore._value,
        max_concurrent=MAX_CONCURRENT_REPORTS,
        browser_ready=True,
        browser_error=None,
        rate_limit=asdict(_rate_limiter.get_stats()) if _rate_limiter is not None else None,
    )


# ============================================================================
# Report Generation Endpoint
# ============================================================================

@app.post("/doc-gen", dependencies=[Depends(verify_api_key), Depends(enforce_rate_limit)])
async def doc_gen(
    report_data: SubmittedReportData,
    report_type: Optional[str] = Query(None, alias="reportType"),
    x_correlation_id: Optional[str] = Header(None),
):
    """
    Generate a pay transparency report.

    Args:
        report_data: Fully calculated report data (camelCase JSON)
        report_type: 'html' or 'pdf'
        x_correlation_id: Request id propagated from the caller, for logs

    Returns:
        HTMLResponse, or StreamingResponse with PDF binary data

    Raises:
        HTTPException: 400 for invalid input, 500 for generation failures, 503 for overload
    """
    correlation = x_correlation_id or "-"

    try:
        report_format = ReportFormat((report_type or "").lower())
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported reportType '{report_type}'. Use 'html' or 'pdf'."
        )

    # Check capacity
    if _report_semaphore._value <= 0:
        logger.warning(f"[{correlation}] Doc gen service overloaded, rejecting request")
        raise HTTPException(
            status_code=503,
            detail="Service overloaded. Too many concurrent report generations."
        )

    async with _report_semaphore:
        try:
            logger.info(
                f"[{correlation}] Starting {report_format.value} report generation "
                f"(company={report_data.company_name}, draft={report_data.is_draft})"
            )

            result = await asyncio.wait_for(
                generate_report(report_format, report_data, settings),
                timeout=settings.generation_timeout_seconds,
            )

            logger.info(f"[{correlation}] Report generation completed")

            if report_format == ReportFormat.PDF:
                return StreamingResponse(
                    BytesIO(result),
                    media_type='application/pdf',
                    headers={
                        'Content-Disposition': 'attachment; filename="report.pdf"'
                    }
                )
            return HTMLResponse(content=result)

        except HTTPException:
            raise
        except TemplateRenderError as e:
            logger.error(f"[{correlation}] Report template failed: {str(e)}")
            raise HTTPException(
                status_code=400,
                detail=f"Report data could not be rendered: {str(e)}"
            )
        except asyncio.TimeoutError:
            logger.error(f"[{correlation}] Report generation timed out")
            raise HTTPException(
                status_code=500,
                detail=f"Report generation timed out after {settings.generation_timeout_seconds}s"
            )
        except Exception as e:
            logger.error(f"[{correlation}] Report generation failed: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail=f"Report generation failed: {str(e)}"
            )
