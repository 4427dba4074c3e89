import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from .db import engine, Base
from .routers.applications import router as applications_router
from .routers.institutions import router as institutions_router
from app.setup_logging import setup_logging

# --------------------------------------------------------------------
# App bootstrap
# --------------------------------------------------------------------
setup_logging() # Init Logging
log = logging.getLogger(__name__)

# Create database tables if they don’t exist.
Base.metadata.create_all(bind=engine)

# --------------------------------------------------------------------
# FastAPI application with lifespan hook
# --------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("questionnaire service starting")
    yield
    log.info("questionnaire service stopped")

# Create the FastAPI app instance
app = FastAPI(title="Questionnaire Migration Service", lifespan=lifespan)

# --------------------------------------------------------------------
# Routes
# --------------------------------------------------------------------
@app.get("/healthz")
def health():
    """Simple health probe for monitoring."""
    return {"ok": True, "service": "questionnaire", "version": 1}

# Register API routers:
app.include_router(institutions_router)
app.include_router(applications_router)
