from __future__ import annotations

from pathlib import Path

from aicompass.catalog.filters import filter_llms, filter_tools, paginate
from aicompass.catalog.loader import load_llm_catalog, load_tool_catalog
from aicompass.catalog.models import LLMEntry, ToolEntry
from aicompass.config import Config
from aicompass.exceptions import CatalogError
from aicompass.log import logger

__all__ = [
    "CatalogRepository",
    "LLMEntry",
    "ToolEntry",
    "paginate",
]


class CatalogRepository:
    """Category lookups over the static catalogs.

    Load and parse failures are logged and answered with an empty list.
    """

    def __init__(self, llm_catalog_path: str | Path, tool_catalog_path: str | Path) -> None:
        self.llm_catalog_path = Path(llm_catalog_path)
        self.tool_catalog_path = Path(tool_catalog_path)

    @classmethod
    def from_config(cls, config: Config) -> CatalogRepository:
        return cls(config.llm_catalog_path, config.tool_catalog_path)

    def llms_for(self, category: str) -> list[LLMEntry]:
        try:
            entries = load_llm_catalog(self.llm_catalog_path)
        except CatalogError as e:
            logger.error(f"LLM catalog unavailable: {e}")
            return []

        matches = filter_llms(entries, category)
        if not matches:
            logger.warning(f"No matching LLMs for category: {category}")
        return matches

    def tools_for(self, category: str) -> list[ToolEntry]:
        try:
            entries = load_tool_catalog(self.tool_catalog_path.as_posix())
        except CatalogError as e:
            logger.error(f"Tool catalog unavailable: {e}")
            return []

        matches = filter_tools(entries, category)
        if not matches:
            logger.warning(f"No matching tools for category: {category}")
        return matches
