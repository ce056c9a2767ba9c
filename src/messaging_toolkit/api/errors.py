"""
Conversion of failures into the '{"error": str}' response shape.

'MessagingError' subclasses carry their own status. FastAPI's own errors
(unknown route, wrong method, unparsable or mistyped body) are mapped onto the
same shape, with body problems reported as 400. Unexpected exceptions are
caught by the request middleware in 'messaging_toolkit.api.app' and never
reach the client beyond a generic message.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from messaging_toolkit.errors import MessagingError


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"Invalid request body: {location} {first.get('msg', '')}".replace("  ", " ").strip()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MessagingError)
    async def handle_messaging_error(request: Request, exc: MessagingError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(400, _describe_validation_error(exc))
