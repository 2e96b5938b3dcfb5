"""Application exceptions and the JSON error envelope.

Every error leaving the API has the shape ``{"success": false, "error": ...}``.
Routes raise; the handlers registered here convert known errors and
``UnhandledErrorMiddleware`` converts everything else.
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class UpstreamError(RuntimeError):
    """An outbound call (LLM or catalog) failed."""


class LLMResponseError(UpstreamError):
    """The LLM replied with something that is not a usable analysis."""


class UpstreamTimeoutError(UpstreamError):
    """An outbound call did not finish within the configured window."""


class NotConfiguredError(UpstreamError):
    """A feature was used without its credential configured."""


def _error_body(message: str, exc: Exception | None = None, debug: bool = False, **extra) -> dict:
    body = {"success": False, "error": message}
    body.update({key: value for key, value in extra.items() if value is not None})
    if debug and exc is not None:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Render unexpected exceptions as the error envelope.

    Must be installed inside CORSMiddleware so 500 responses still carry the
    CORS headers.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Unexpected error on %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=_error_body(str(exc) or "Unknown error", exc, self.debug),
            )


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """Install handlers that render every failure as the error envelope.

    Args:
        app: Application to install the handlers on.
        debug: Include the formatted traceback under ``stack``.
    """

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("Validation failed", details=details),
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=exc.headers,
        )

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.error("Upstream failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(str(exc), exc, debug),
        )
