"""Thin wrapper around the hosted Gemini text model."""

import logging
from typing import Optional

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from .config import get_settings

log = logging.getLogger(__name__)


class LLMUnavailable(RuntimeError):
    """No credential is configured for the model provider."""


_SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_ONLY_HIGH,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_ONLY_HIGH,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_ONLY_HIGH,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_ONLY_HIGH,
}


def generate_text(
    prompt: str,
    temperature: float = 0.7,
    max_output_tokens: int = 1024,
    model_name: Optional[str] = None,
) -> str:
    """Send a single text prompt and return the model's text.

    Raises ``LLMUnavailable`` when no API key is set; any provider error
    propagates unchanged. A blocked prompt yields an empty string.
    """
    settings = get_settings()
    if not settings.gemini_api_key:
        raise LLMUnavailable("Missing GEMINI_API_KEY")

    genai.configure(api_key=settings.gemini_api_key)
    model = genai.GenerativeModel(
        model_name=model_name or settings.gemini_model,
        generation_config={
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
        },
        safety_settings=_SAFETY_SETTINGS,
    )
    response = model.generate_content(prompt)
    # A blocked prompt or empty candidate has no text; ``response.text`` raises.
    if not response.candidates or not response.candidates[0].content.parts:
        reason = getattr(response.prompt_feedback, "block_reason", None)
        log.warning("Model returned no candidates (block_reason=%s)", reason)
        return ""
    return response.text or ""
