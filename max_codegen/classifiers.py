"""Keyword heuristics used by the chat orchestrator.

Both classifiers use case-insensitive substring matching (not whole words),
so "bros" counts as "bro" and "findings" triggers "find".
"""

from typing import Dict, Tuple


ENGLISH = "english"
MIXED = "mixed"
SWAHILI = "swahili"

SWAHILI_MARKERS: Tuple[str, ...] = (
    "habari", "sasa", "niko", "kwani", "basi", "ndio", "karibu", "asante",
)
SHENG_MARKERS: Tuple[str, ...] = (
    "bro", "maze", "manze", "noma", "fiti", "safi", "buda", "msee", "mwana", "poa",
)

# 0 markers -> english, up to MIXED_MAX -> mixed, anything above -> swahili
MIXED_MAX = 2

LANGUAGE_INSTRUCTIONS: Dict[str, str] = {
    ENGLISH: "Respond in English, friendly Kenyan developer tone.",
    MIXED: "Respond bilingually: mostly English with Swahili/Sheng flavor.",
    SWAHILI: "Respond fully in Swahili or Sheng depending on tone.",
}

SEARCH_TRIGGERS: Tuple[str, ...] = (
    "search",
    "find",
    "look up",
    "check online",
    "trending",
    "latest updates",
    "latest news",
    "news about",
    "current events",
    "what's happening",
    "on reddit",
    "on twitter",
    "on youtube",
    "on instagram",
)


def count_markers(text: str) -> int:
    """Number of distinct dialect/slang markers present in *text*."""
    lower = (text or "").lower()
    return sum(1 for w in SWAHILI_MARKERS + SHENG_MARKERS if w in lower)


def classify_language(text: str) -> str:
    hits = count_markers(text)
    if hits == 0:
        return ENGLISH
    if hits <= MIXED_MAX:
        return MIXED
    return SWAHILI


def language_instruction(text: str) -> str:
    return LANGUAGE_INSTRUCTIONS[classify_language(text)]


def wants_live_search(text: str) -> bool:
    lower = (text or "").lower()
    return any(trigger in lower for trigger in SEARCH_TRIGGERS)
