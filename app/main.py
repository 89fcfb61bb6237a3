"""FastAPI application entrypoint for the task API."""

import logging

from fastapi import FastAPI

from app.api.tasks import router as tasks_router
from app.core.config import get_settings
from app.core.errors import register_error_handlers
from app.db import models as _models  # noqa: F401

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)
logger.info("Starting task API with settings=%s", settings.safe_for_logging())

app = FastAPI(title="Taskboard")
register_error_handlers(app)
app.include_router(tasks_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Health check stub endpoint for service readiness."""
    return {"status": "ok"}
