"""
FastAPI entry point for the Immigration AMA Assistant.

Serves the persona chat endpoint plus health and Prometheus metrics.
Run locally with ``python -m app.main`` from the ``api`` directory.
"""

import logging
import sys
from contextlib import asynccontextmanager

from app.core.config import get_settings
from app.core.error_handlers import register_error_handlers
from app.routes import chat, health
from app.services.chat_service import ImmigrationChatService
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator
from prometheus_fastapi_instrumentator import metrics as instrumentator_metrics

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("app.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    app.state.settings = settings
    settings.ensure_data_dirs()

    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set; chat requests will fail upstream")

    chat_service = ImmigrationChatService(settings=settings)
    app.state.chat_service = chat_service
    logger.info(
        f"Serving {settings.PERSONA_NAME} persona on model {settings.ACTIVE_CHAT_MODEL}"
    )

    yield

    logger.info("Closing OpenAI client...")
    app.state.chat_service = None
    await chat_service.client.close()


def _add_cors(app: FastAPI) -> None:
    origins = get_settings().CORS_ORIGINS
    # Starlette forbids credentials together with a wildcard origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )


def _add_metrics(app: FastAPI) -> None:
    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_respect_env_var=False,
        excluded_handlers=["/health.*", "/healthcheck", "/metrics"],
    )
    instrumentator.add(instrumentator_metrics.default())
    instrumentator.instrument(app)

    # Served from the default registry so the chat counters appear alongside
    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app = FastAPI(
    title=get_settings().PROJECT_NAME,
    docs_url="/api/docs",
    openapi_url=f"{get_settings().API_V1_STR}/openapi.json",
    lifespan=lifespan,
)
_add_cors(app)
_add_metrics(app)

app.include_router(health.router, tags=["Health"])
app.include_router(chat.router, prefix="/api", tags=["Chat"])

register_error_handlers(app)


@app.get("/healthcheck", include_in_schema=False)
async def healthcheck():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0" if settings.DEBUG else "127.0.0.1",
        port=8000,
        reload=settings.DEBUG,
    )
