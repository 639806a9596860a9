"""Cross-origin access for the browser frontends."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from authsvc.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the configured frontend origins; requests without an Origin pass as usual."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )
