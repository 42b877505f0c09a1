# checkout_api/errors.py
from __future__ import annotations

import logging
from typing import Any, Dict

import stripe
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .settings import settings

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    """A request failure that maps straight onto an HTTP status and JSON body."""

    def __init__(self, status_code: int, message: str, **extra: Any):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.extra = extra

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "Invalid request")
    return f"{loc}: {msg}" if loc else msg


async def _checkout_error_handler(request: Request, exc: CheckoutError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _stripe_error_handler(request: Request, exc: stripe.StripeError):
    status = exc.http_status if exc.http_status and 400 <= exc.http_status < 500 else 500
    message = exc.user_message or str(exc) or "Stripe request failed"
    logger.error("stripe error on %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=status, content={"error": message})


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _validation_message(exc)})


async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    # the router's own 404 for paths nothing matched
    if exc.status_code == 404 and detail == "Not Found":
        detail = "Route not found"
    return JSONResponse(status_code=exc.status_code, content={"error": detail})


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    body: Dict[str, Any] = {"error": "Something went wrong!"}
    if settings.is_development:
        body["message"] = str(exc)
    return JSONResponse(status_code=500, content=body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CheckoutError, _checkout_error_handler)
    app.add_exception_handler(stripe.StripeError, _stripe_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
