"""
CORS for the browser front-end

The drawing app calls the API from its own origin and sends the JWT in
the Authorization header, so only those methods and headers are allowed.
"""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

DEFAULT_ORIGINS = "https://mydayiart.com,https://www.mydayiart.com"
LOCAL_FRONTEND_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]

ALLOWED_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Authorization", "Content-Type"]


def get_allowed_origins() -> list[str]:
    """
    Origins from CORS_ORIGINS (comma separated) plus FRONTEND_URL.
    Local dev servers are added outside production.
    """
    configured = os.getenv("CORS_ORIGINS", DEFAULT_ORIGINS)
    origins = [origin.strip().rstrip("/") for origin in configured.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL")
    if frontend_url and frontend_url.rstrip("/") not in origins:
        origins.append(frontend_url.rstrip("/"))

    if os.getenv("ENVIRONMENT", "development") != "production":
        origins.extend(origin for origin in LOCAL_FRONTEND_ORIGINS if origin not in origins)

    return origins


def setup_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
    )
