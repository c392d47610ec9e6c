"""One conversation turn: memory, optional live search, model reply."""

import logging
import re
from typing import Optional, Tuple

from . import llm
from .aggregator import aggregate
from .classifiers import language_instruction, wants_live_search
from .memory import ConversationStore, get_store
from .models import AggregatedResultSet, ChatReply, ConversationRecord
from .prompts import render
from .summarize import summarize

log = logging.getLogger(__name__)

ROLE_LABELS = {"system": "System", "user": "User", "assistant": "Assistant"}

DISCLAIMER_PHRASES = ("as an ai", "language model")
_DISCLAIMER_RE = re.compile("|".join(re.escape(p) for p in DISCLAIMER_PHRASES), re.IGNORECASE)

EMPTY_REPLY = "No response received."
CONTEXT_RESULTS = 5


class ChatModelError(RuntimeError):
    """The chat model could not produce a reply."""


def clean_reply(text: Optional[str]) -> str:
    cleaned = _DISCLAIMER_RE.sub("", text or "").strip()
    return cleaned or EMPTY_REPLY


def format_search_context(results: AggregatedResultSet, synopsis: str) -> str:
    return render(
        "search_context.txt.j2",
        results=results.results[:CONTEXT_RESULTS],
        synopsis=synopsis,
    )


def build_prompt(record: ConversationRecord, search_context: str, instruction: str) -> str:
    return render(
        "chat_prompt.txt.j2",
        conversation=record.conversation,
        labels=ROLE_LABELS,
        search_context=search_context,
        instruction=instruction,
    )


def _live_search(user_text: str) -> Tuple[AggregatedResultSet, str]:
    try:
        results = aggregate(user_text)
    except Exception as exc:
        log.warning("Live search failed, continuing without results: %s", exc)
        return AggregatedResultSet(), ""
    if not results:
        return results, ""
    synopsis = summarize(user_text, results)
    return results, format_search_context(results, synopsis)


def handle_turn(
    user_id: str,
    user_text: str,
    project: Optional[str] = None,
    store: Optional[ConversationStore] = None,
) -> ChatReply:
    """Run a single chat turn for *user_id* and persist the transcript.

    Raises ``ValueError`` for empty input and ``ChatModelError`` when the
    model call fails; in the latter case nothing is saved.
    """
    if not user_id or not user_text:
        raise ValueError("user_id and user_text are required")
    store = store or get_store()

    with store.lock(user_id):
        record = store.load(user_id)
        if project:
            record.last_project = project
        record.last_task = user_text
        record.append("user", user_text)

        results = AggregatedResultSet()
        search_context = ""
        if wants_live_search(user_text):
            results, search_context = _live_search(user_text)
            log.info("Live search for %s returned %d results", user_id, len(results))

        prompt = build_prompt(record, search_context, language_instruction(user_text))
        try:
            raw = llm.generate_text(prompt, temperature=0.9, max_output_tokens=900)
        except Exception as exc:
            log.error("Chat model failed for %s: %s", user_id, exc)
            raise ChatModelError(str(exc)) from exc

        reply = clean_reply(raw)
        record.append("assistant", reply)
        store.save(user_id, record)

    return ChatReply(reply=reply, news=results.to_cards())
