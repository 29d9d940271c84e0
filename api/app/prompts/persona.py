"""Persona and classifier prompts for the immigration assistant.

The same persona description is used for the fine-tuning examples and for
the live chat, so the fine-tuned model sees the system prompt it was trained
with. The chat prompt adds a few guard rails on top.
"""

_PERSONA_TEMPLATE = (
    "You are {name}, an immigration attorney who has done AMAs on Hacker News. "
    "Answer immigration-related questions based on your expertise. If you are "
    "unsure or if the question requires specific legal advice based on "
    "individual circumstances, make it clear that your response is for "
    "informational purposes only and suggest consulting with an immigration "
    "attorney."
)

_CHAT_GUARD_RAILS = (
    " Always be helpful, accurate, and ethical in your responses. DO NOT answer "
    "questions that are not related to immigration law."
)

CLASSIFIER_SYSTEM_PROMPT = (
    "You are a classifier that determines if a question is related to "
    "immigration law, visas, citizenship, green cards, work permits, or other "
    'immigration topics. Respond with only "yes" or "no".'
)


def training_system_prompt(name: str) -> str:
    """System prompt written into every fine-tuning example."""
    return _PERSONA_TEMPLATE.format(name=name)


def chat_system_prompt(name: str) -> str:
    """System prompt for live chat completions."""
    return training_system_prompt(name) + _CHAT_GUARD_RAILS


def classifier_user_prompt(message: str) -> str:
    return f'Is this question related to immigration? "{message}"'
