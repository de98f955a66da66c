# procureai/llm.py

import logging
from typing import Optional

from openai import OpenAI

from procureai.config import Settings

logger = logging.getLogger(__name__)


def build_client(settings: Settings) -> OpenAI:
    kwargs = {"api_key": settings.openai_api_key, "timeout": settings.request_timeout}
    if settings.openai_base_url:
        kwargs["base_url"] = settings.openai_base_url
    logger.debug("Building OpenAI client (base_url=%s, timeout=%ss)", settings.openai_base_url, settings.request_timeout)
    return OpenAI(**kwargs)


def complete_json(client: OpenAI, model: str, system: str, user: str, json_mode: bool = True) -> str:
    """Run one chat completion at temperature 0 and return the raw reply text."""
    kwargs = {}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    resp = client.chat.completions.create(
        model       = model,
        messages    = [
            {"role": "system", "content": system},
            {"role": "user",   "content": user},
        ],
        temperature = 0.0,
        **kwargs,
    )
    choices = getattr(resp, "choices", None)
    if not choices:
        raise ValueError("Model reply had no choices.")
    message = getattr(choices[0], "message", None)
    if message is None:
        raise ValueError("Model reply had no message.")
    content: Optional[str] = message.content
    return (content or "").strip()
