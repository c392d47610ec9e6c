import logging
from typing import Sequence

from . import llm
from .config import get_settings
from .models import AggregatedResultSet, NormalizedResult
from .prompts import render

log = logging.getLogger(__name__)

FALLBACK_REPLY = "Here's what I found online"


def build_summary_prompt(query: str, results: Sequence[NormalizedResult]) -> str:
    return render("summary_prompt.txt.j2", query=query, results=results)


def summarize(query: str, results: AggregatedResultSet) -> str:
    """Best-effort synopsis of *results*. Never raises.

    Falls back to ``FALLBACK_REPLY`` when the model is not configured, there is
    nothing to summarize, or the call fails in any way.
    """
    if not get_settings().has_gemini:
        log.info("Summarizer not configured; using fallback reply")
        return FALLBACK_REPLY
    if not results:
        return FALLBACK_REPLY

    prompt = build_summary_prompt(query, results.results)
    try:
        text = llm.generate_text(prompt, temperature=0.4, max_output_tokens=512)
    except Exception as exc:
        log.warning("Summarization failed for %r: %s", query, exc)
        return FALLBACK_REPLY
    return (text or "").strip() or FALLBACK_REPLY
