"""The fixed task categories and the keyword fallback classifier."""

from __future__ import annotations

import re

WRITING = "Writing / Content Creation"
CODING = "Coding / Development"
INSTRUCTION = "Instruction / Learning"
RESEARCH = "Research / Information Retrieval"
CREATIVE = "Creative Generation"
CONVERSATION = "Conversation / Chat"
DATA_ANALYSIS = "Data Analysis"
MULTIMODAL = "Multimodal (Image / Audio) Tasks"

CATEGORIES: list[str] = [
    WRITING,
    CODING,
    INSTRUCTION,
    RESEARCH,
    CREATIVE,
    CONVERSATION,
    DATA_ANALYSIS,
    MULTIMODAL,
]

DEFAULT_CATEGORY = WRITING
UNKNOWN_CATEGORY = "Unknown"

# Order matters: the first matching pattern wins.
_FALLBACK_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(code|script|program)\b"), CODING),
    (re.compile(r"\b(summarize|write|create)\b"), WRITING),
    (re.compile(r"\b(learn|teach|explain)\b"), INSTRUCTION),
    (re.compile(r"\b(research|what is|information)\b"), RESEARCH),
    (re.compile(r"\b(generate|creative|design)\b"), CREATIVE),
    (re.compile(r"\b(chat|talk|converse)\b"), CONVERSATION),
    (re.compile(r"\b(data|analy(s|z)e)\b"), DATA_ANALYSIS),
    (re.compile(r"\b(image|photo|audio|video)\b"), MULTIMODAL),
]


def fallback_classify(prompt: str) -> str:
    """Pick a category from keywords in the prompt.

    Always returns one of ``CATEGORIES``, falling back to ``DEFAULT_CATEGORY``.
    """
    lowered = prompt.lower()
    for pattern, category in _FALLBACK_RULES:
        if pattern.search(lowered):
            return category
    return DEFAULT_CATEGORY


def normalize_category(raw: str | None) -> str | None:
    """Map a model's answer onto a canonical label.

    Returns ``UNKNOWN_CATEGORY`` for an empty answer and ``None`` when the
    answer names no known category.
    """
    text = (raw or "").strip()
    if not text:
        return UNKNOWN_CATEGORY

    lowered = text.lower().strip(" .\"'")
    for category in CATEGORIES:
        if lowered == category.lower():
            return category
    for category in CATEGORIES:
        if category.lower() in lowered:
            return category
    return None
