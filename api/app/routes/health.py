import os
import time

import psutil  # type: ignore[import-untyped]
from fastapi import APIRouter, Request

from app.services.training.dataset_builder import count_training_examples

router = APIRouter()


def _system_usage() -> dict:
    return {
        "cpu_percent": psutil.cpu_percent(),
        "memory_percent": psutil.virtual_memory().percent,
        "disk_percent": psutil.disk_usage("/").percent,
    }


@router.get("/health")
async def health_check(request: Request):
    """
    Report chat service state, the model in use and host resource usage.

    Status stays "initializing" until the lifespan has created the chat
    service. ``training_examples`` is the size of the fine-tuning file on
    disk, 0 when the scraper has not run yet.
    """
    chat_status = (
        "healthy"
        if getattr(request.app.state, "chat_service", None)
        else "initializing"
    )

    settings = getattr(request.app.state, "settings", None)
    model = None
    fine_tuned = False
    training_examples = 0
    if settings is not None:
        model = settings.ACTIVE_CHAT_MODEL
        fine_tuned = bool(settings.OPENAI_MODEL_ID.strip())
        training_examples = count_training_examples(settings.PROCESSED_DATA_FILE_PATH)

    return {
        "status": chat_status,
        "timestamp": int(time.time()),
        "build_id": os.getenv("BUILD_ID", "unknown"),
        "model": model,
        "fine_tuned": fine_tuned,
        "training_examples": training_examples,
        "system": _system_usage(),
        "services": {"chat": chat_status},
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Ready once the chat service exists."""
    if getattr(request.app.state, "chat_service", None) is None:
        return {"status": "initializing"}
    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check():
    return {"status": "alive"}
