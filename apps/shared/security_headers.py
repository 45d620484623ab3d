"""Security headers for API responses."""

from fastapi import FastAPI, Request
from fastapi.responses import Response


DEFAULT_CSP = (
    "default-src 'self'; "
    "img-src 'self' data: https:; "
    "connect-src 'self'"
)

SECURITY_HEADERS = {
    "Content-Security-Policy": DEFAULT_CSP,
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
}


def setup_security_headers(app: FastAPI) -> None:
    """Add CSP, HSTS, nosniff and clickjacking headers unless already set."""

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
