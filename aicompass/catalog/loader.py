"""Loading of the static LLM and tool catalogs."""

from __future__ import annotations

import json
import re
from functools import cache
from pathlib import Path

from pydantic import BaseModel, ValidationError

from aicompass.catalog.models import LLMEntry, ToolEntry
from aicompass.exceptions import CatalogError
from aicompass.log import logger

# A JSON string literal, or one of the bare non-numeric tokens outside strings.
_TOKEN_PATTERN = re.compile(r'"(?:\\.|[^"\\])*"|-?Infinity\b|\bNaN\b')


def sanitize_json_text(text: str) -> str:
    """Replace bare ``NaN`` / ``Infinity`` tokens with ``null``.

    Tokens inside string literals are left untouched.
    """

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        return token if token.startswith('"') else "null"

    return _TOKEN_PATTERN.sub(_replace, text)


def _read_entries(path: str | Path, model: type[BaseModel], sanitize: bool) -> list:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Can not read catalog {path}: {e}") from e

    if sanitize:
        text = sanitize_json_text(text)
    try:
        raw_entries = json.loads(text)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog {path} is not valid JSON: {e}") from e

    if not isinstance(raw_entries, list):
        raise CatalogError(f"Catalog {path} must contain a JSON array")

    entries = []
    for index, raw in enumerate(raw_entries):
        try:
            entries.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping invalid entry #{index} in {path}: {e}")
    return entries


def load_llm_catalog(path: str | Path) -> list[LLMEntry]:
    """Read the LLM catalog. Not cached, every query sees the file as it is."""
    return _read_entries(path, LLMEntry, sanitize=False)


@cache
def load_tool_catalog(path: str) -> list[ToolEntry]:
    """Read the tool catalog once per process."""
    entries = _read_entries(path, ToolEntry, sanitize=True)
    logger.info(f"Loaded {len(entries)} tools from {path}")
    return entries
