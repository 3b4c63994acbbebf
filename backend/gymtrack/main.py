import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from gymtrack.config import IMAGE_DIR, LOG_LEVEL, STATIC_DIR
from gymtrack.database import Base, engine
import gymtrack.models
from gymtrack.api import exercises

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def run_migrations():
    """Apply pending Alembic migrations, creating missing tables if that fails."""
    try:
        from alembic.config import Config
        from alembic import command
        alembic_cfg = Config(str(ALEMBIC_INI))
        alembic_cfg.attributes["configure_logger"] = False
        command.upgrade(alembic_cfg, "head")
        logger.info("[Alembic] Migrations applied successfully")
    except Exception as e:
        logger.warning(f"[Alembic] Migration failed, falling back to create_all: {e}")

    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    os.makedirs(IMAGE_DIR, exist_ok=True)
    run_migrations()
    yield


app = FastAPI(title="GymTrack", lifespan=lifespan)
app.mount("/static", StaticFiles(directory=STATIC_DIR, check_dir=False), name="static")
app.include_router(exercises.router)


@app.get("/")
def root():
    return RedirectResponse(url="/exercise/list", status_code=301)


@app.get("/health")
def health_check():
    return {"status": "healthy", "message": "API is running"}
