"""Prompts package for the immigration assistant.

Provides the persona prompts and centralized fallback messages.
"""

from app.prompts import error_messages
from app.prompts.persona import (
    CLASSIFIER_SYSTEM_PROMPT,
    chat_system_prompt,
    classifier_user_prompt,
    training_system_prompt,
)

__all__ = [
    "CLASSIFIER_SYSTEM_PROMPT",
    "chat_system_prompt",
    "classifier_user_prompt",
    "error_messages",
    "training_system_prompt",
]
