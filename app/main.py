"""
Daily theme API

Users vote for tomorrow's theme; each day the most voted theme is turned
into a generated image.
"""
import os
import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from apps.shared.database import check_db_connection, engine, Base
from apps.shared.cors import setup_cors
from apps.shared.errors import setup_exception_handlers
from apps.shared.security_headers import setup_security_headers
from apps.days.images import IMAGE_DIR, IMAGE_URL_PREFIX
from apps.days.main import router as days_router
from apps.users.main import router as users_router

logger = logging.getLogger("dayiart")
logging.basicConfig(level=logging.INFO)

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Dayiart API",
    version="1.0.0",
    description="Daily theme voting and AI image generation",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

setup_cors(app)
setup_security_headers(app)
setup_exception_handlers(app)


@app.get("/health")
def health():
    """Health check endpoint - returns service status and database connectivity"""
    db_connected = check_db_connection()

    return {
        "status": "ok" if db_connected else "degraded",
        "service": "dayiart",
        "database": "connected" if db_connected else "disconnected",
    }


app.include_router(days_router)
app.include_router(users_router)

# Generated images are public
os.makedirs(IMAGE_DIR, exist_ok=True)
app.mount(IMAGE_URL_PREFIX, StaticFiles(directory=IMAGE_DIR), name="images")
