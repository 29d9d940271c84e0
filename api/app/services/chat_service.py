"""
Chat service answering immigration questions in the persona's voice.

Each message costs at most two OpenAI calls: a cheap yes/no topic
classification, then the persona completion for on-topic questions.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError

from app.core.config import Settings
from app.core.exceptions import ExternalAPIError
from app.prompts import (
    CLASSIFIER_SYSTEM_PROMPT,
    chat_system_prompt,
    classifier_user_prompt,
    error_messages,
)
from app.utils.logging import redact_pii

logger = logging.getLogger(__name__)


@dataclass
class ChatReply:
    """Result of a chat turn."""

    response: str
    on_topic: bool
    model: Optional[str]
    response_time: float


class ImmigrationChatService:
    """Classifies incoming questions and generates persona answers."""

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.settings = settings
        self.client = client or AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.OPENAI_TIMEOUT,
            max_retries=settings.OPENAI_MAX_RETRIES,
        )
        self.system_prompt = chat_system_prompt(settings.PERSONA_NAME)

    def _sample(self, message: str) -> str:
        return redact_pii(message[: self.settings.MAX_SAMPLE_LOG_LENGTH])

    async def is_immigration_related(self, message: str) -> bool:
        """Ask the classifier model whether the message is about immigration.

        Fails open: if the classifier call errors, the question is allowed.
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.settings.CLASSIFIER_MODEL,
                messages=[
                    {"role": "system", "content": CLASSIFIER_SYSTEM_PROMPT},
                    {"role": "user", "content": classifier_user_prompt(message)},
                ],
                temperature=0,
                max_tokens=self.settings.CLASSIFIER_MAX_TOKENS,
            )
        except OpenAIError as e:
            logger.error(f"Immigration check failed, allowing question: {e}")
            return True

        answer = ""
        if response.choices and response.choices[0].message.content:
            answer = response.choices[0].message.content.strip().lower()
        logger.debug(f"Classifier answered {answer!r} for: {self._sample(message)}")
        return answer == "yes"

    def build_messages(
        self, message: str, history: Optional[Sequence[Any]] = None
    ) -> List[Dict[str, str]]:
        """Assemble system prompt, trimmed history and the new user message.

        History entries may be dicts or objects with ``role``/``content``.
        """
        messages = [{"role": "system", "content": self.system_prompt}]

        recent = list(history or [])
        max_history = self.settings.MAX_CHAT_HISTORY_LENGTH
        if len(recent) > max_history:
            recent = recent[-max_history:] if max_history > 0 else []

        for entry in recent:
            if isinstance(entry, dict):
                role, content = entry.get("role"), entry.get("content")
            else:
                role, content = entry.role, entry.content
            messages.append({"role": role, "content": content})

        messages.append({"role": "user", "content": message})
        return messages

    async def respond(
        self, message: str, history: Optional[Sequence[Any]] = None
    ) -> ChatReply:
        """Answer a chat message.

        Raises:
            ExternalAPIError: If the completion call fails
        """
        start_time = time.time()
        logger.info(f"Chat question: {self._sample(message)}")

        if not await self.is_immigration_related(message):
            logger.info("Question classified as off-topic")
            return ChatReply(
                response=error_messages.off_topic(self.settings.PERSONA_NAME),
                on_topic=False,
                model=None,
                response_time=time.time() - start_time,
            )

        model = self.settings.ACTIVE_CHAT_MODEL
        try:
            completion = await self.client.chat.completions.create(
                model=model,
                messages=self.build_messages(message, history),
                temperature=self.settings.LLM_TEMPERATURE,
                max_tokens=self.settings.MAX_TOKENS,
            )
        except OpenAIError as e:
            logger.error(f"Chat completion failed (model={model}): {e}")
            raise ExternalAPIError("openai", "chat completion failed") from e

        content = ""
        if completion.choices and completion.choices[0].message.content:
            content = completion.choices[0].message.content.strip()

        response_time = time.time() - start_time
        logger.info(f"Answered with model {model} in {response_time:.2f}s")
        return ChatReply(
            response=content or error_messages.NO_RESPONSE,
            on_topic=True,
            model=model,
            response_time=response_time,
        )
