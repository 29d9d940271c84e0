"""Centralized user-facing fallback messages for the immigration assistant.

All canned replies live here so they keep a consistent voice with the
persona prompt.
"""

OFF_TOPIC_TEMPLATE: str = (
    "I'm {name}, an immigration attorney. I only answer questions about "
    "immigration. Please ask me an immigration-related question."
)

NO_RESPONSE: str = "Sorry, I could not generate a response."


def off_topic(name: str) -> str:
    return OFF_TOPIC_TEMPLATE.format(name=name)
