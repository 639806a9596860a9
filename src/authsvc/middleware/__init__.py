"""Middleware registration."""

from fastapi import FastAPI

from authsvc.config import Settings
from authsvc.middleware.cors import setup_cors
from authsvc.middleware.error_handler import setup_error_handlers
from authsvc.middleware.logging import setup_logging
from authsvc.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register logging, error handlers and middleware.

    Starlette runs middleware in reverse-add order, so CORS is added last to
    wrap every response, including errors.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
