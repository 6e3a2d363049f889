from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class _CatalogEntry(BaseModel):
    description: str = ""
    link: str = ""
    task_type: str = ""
    tags: list[str] = Field(default_factory=list)

    @field_validator("description", "link", "task_type", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    def search_fields(self) -> list[str]:
        return [self.task_type.lower(), *(tag.lower() for tag in self.tags)]


class LLMEntry(_CatalogEntry):
    title: str
    highlights: str | None = None


class ToolEntry(_CatalogEntry):
    name: str
    pricing: float | None = None
    rating: float | None = None
