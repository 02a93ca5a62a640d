"""Middleware registration."""

from fastapi import FastAPI

from zuna.config import Settings
from zuna.middleware.cors import setup_cors
from zuna.middleware.error_handler import setup_error_handlers
from zuna.middleware.logging import setup_logging
from zuna.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register middleware; the last one added runs outermost, so CORS goes last."""
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
