"""FastAPI application entry point."""
import logging
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from davaoclean.config import settings
from davaoclean.database import Base, engine
from davaoclean.dependencies import require_api_key

# Import routers
from davaoclean.routers import auth, profiles, events, participants, uploads, classifier, info

# Import all models so Base.metadata knows about them
from davaoclean.models.profile import Profile, AuthSession  # noqa: F401
from davaoclean.models.event import Event                   # noqa: F401
from davaoclean.models.participant import Participant       # noqa: F401
from davaoclean.models.upload import Upload                 # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="DavaoClean",
    description="Waste classification and clean-up drive volunteering for Davao City",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
api_key = [Depends(require_api_key)]
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"], dependencies=api_key)
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"], dependencies=api_key)
app.include_router(events.router, prefix="/api/events", tags=["Events"], dependencies=api_key)
app.include_router(participants.router, prefix="/api/participants", tags=["Participants"], dependencies=api_key)
app.include_router(uploads.router, prefix="/api/uploads", tags=["Uploads"], dependencies=api_key)
app.include_router(classifier.router, prefix="/api/classifier", tags=["Classifier"], dependencies=api_key)
app.include_router(info.router, prefix="/api/info", tags=["Info"], dependencies=api_key)

# Stored objects
Path(settings.MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_ROOT), name="media")


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
