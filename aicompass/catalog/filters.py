from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import TypeVar

from aicompass import categories
from aicompass.catalog.models import LLMEntry, ToolEntry

T = TypeVar("T", LLMEntry, ToolEntry)

CATEGORY_KEYWORDS: dict[str, list[str]] = {
    categories.WRITING: ["content generation", "text", "writing"],
    categories.CODING: ["code", "development", "programming"],
    categories.INSTRUCTION: ["education", "instruction", "teaching", "learning"],
    categories.RESEARCH: ["research", "qa", "retrieval", "knowledge"],
    categories.CREATIVE: ["creative", "generation", "imagination"],
    categories.CONVERSATION: ["chat", "dialogue", "conversation", "natural conversation"],
    categories.DATA_ANALYSIS: ["data", "analytics", "analysis"],
    categories.MULTIMODAL: ["multimodal", "image", "audio", "vision"],
}

_MIN_FRAGMENT_LENGTH = 3


def category_fragments(category: str) -> list[str]:
    """Split a category label into lowercase keyword fragments.

    >>> category_fragments("Multimodal (Image / Audio) Tasks")
    ['multimodal', 'image', 'audio', 'tasks']
    """
    fragments = re.split(r"[^a-z0-9]+", category.lower())
    return [f for f in fragments if len(f) >= _MIN_FRAGMENT_LENGTH]


def _matches(entry: LLMEntry | ToolEntry, keywords: Iterable[str]) -> bool:
    fields = entry.search_fields()
    return any(keyword in field for keyword in keywords for field in fields)


def filter_llms(entries: Sequence[LLMEntry], category: str) -> list[LLMEntry]:
    keywords = CATEGORY_KEYWORDS.get(category, [])
    return [entry for entry in entries if _matches(entry, keywords)]


def filter_tools(entries: Sequence[ToolEntry], category: str) -> list[ToolEntry]:
    keywords = category_fragments(category)
    return [entry for entry in entries if _matches(entry, keywords)]


def paginate(entries: Sequence[T], offset: int, size: int) -> tuple[list[T], int]:
    """Return the slice ``[offset, offset + size)`` and the advanced offset.

    The offset only moves forward by the number of entries returned, so
    asking past the end yields an empty batch and the same offset.
    """
    offset = max(offset, 0)
    batch = list(entries[offset : offset + max(size, 0)])
    return batch, offset + len(batch)
