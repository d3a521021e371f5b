import base64
import logging
import secrets

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .logging_setup import configure_logging
from .models import ScreenshotParams
from .screenshot_service import ScreenshotService
from .utils import is_valid_http_url

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

CACHE_HEADERS = {"Cache-Control": "public, max-age=604800, s-maxage=604800"}

# Global screenshot service instance, browser launches on first capture
screenshot_service = ScreenshotService()

app = FastAPI(
    title="Screenshot API",
    description="Render a web page in headless Chromium and return a PNG",
    version="1.0.0",
)


def error_response(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse({"ok": False, "error": error, **extra}, status_code=status_code)


@app.middleware("http")
async def require_api_key(request: Request, call_next):
    """Reject every request without the shared secret, when one is configured"""
    if settings.API_KEY:
        supplied = request.headers.get(settings.API_KEY_HEADER, "")
        if not secrets.compare_digest(supplied.encode(), settings.API_KEY.encode()):
            return error_response(401, "unauthorized")
    return await call_next(request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and unsupported methods look the same to callers
    if exc.status_code in (404, 405):
        return error_response(404, "not found")
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(500, str(exc))


@app.get("/status")
async def status():
    """Liveness check"""
    return {"ok": True}


@app.get("/screenshot")
async def screenshot(request: Request):
    """Capture a screenshot of the page given in ?url="""
    params = ScreenshotParams.from_query(request.query_params)
    if not is_valid_http_url(params.url):
        return error_response(400, "invalid url")

    result = await screenshot_service.capture(params)
    meta = params.meta()

    if not result.success:
        return error_response(500, result.error or "screenshot failed", **meta)

    headers = {**CACHE_HEADERS, "ETag": result.etag}

    if params.format == "json":
        body = {
            "ok": True,
            **meta,
            "bytes": result.file_size,
            "image_mime": result.mime,
            "image_base64": base64.b64encode(result.image).decode(),
        }
        if result.dimensions:
            body["dimensions"] = result.dimensions
        return JSONResponse(body, headers=headers)

    if request.headers.get("if-none-match") == result.etag:
        return Response(status_code=304, headers=headers)

    return Response(content=result.image, media_type=result.mime, headers=headers)


def run():
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
