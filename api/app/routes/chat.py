import logging
import time
from typing import List, Literal, Optional

from fastapi import APIRouter, Request
from prometheus_client import Counter, Gauge, Histogram
from pydantic import BaseModel, Field

from app.core.exceptions import BaseAppException, MessageRequiredError

router = APIRouter()
logger = logging.getLogger(__name__)

# Prometheus metrics for chat tracking
CHAT_TOTAL = Counter(
    "immigration_chat_requests_total",
    "Total number of chat messages processed",
    ["outcome"],
)
CHAT_RESPONSE_TIME_HISTOGRAM = Histogram(
    "immigration_chat_response_time_seconds",
    "Response time distribution for chat messages",
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)
CURRENT_RESPONSE_TIME = Gauge(
    "immigration_chat_current_response_time_seconds", "Latest chat response time"
)
CHAT_ERRORS = Counter(
    "immigration_chat_errors_total", "Total number of chat errors", ["error_type"]
)


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: Optional[str] = None
    messages: List[ChatMessage] = Field(default_factory=list)


class ChatResponse(BaseModel):
    response: str


@router.post("/chat", response_model=ChatResponse)
async def chat(request: Request, chat_request: ChatRequest) -> ChatResponse:
    """Answer an immigration question given the previous conversation."""
    if not chat_request.message or not chat_request.message.strip():
        CHAT_ERRORS.labels(error_type="validation").inc()
        raise MessageRequiredError()

    chat_service = request.app.state.chat_service
    start_time = time.time()

    try:
        reply = await chat_service.respond(
            chat_request.message, chat_request.messages
        )
    except BaseAppException:
        CHAT_ERRORS.labels(error_type="upstream").inc()
        raise

    total_time = time.time() - start_time
    CHAT_TOTAL.labels(outcome="answered" if reply.on_topic else "off_topic").inc()
    CHAT_RESPONSE_TIME_HISTOGRAM.observe(total_time)
    CURRENT_RESPONSE_TIME.set(total_time)

    return ChatResponse(response=reply.response)
