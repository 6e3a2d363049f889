"""Message content and its encoding inside a message's text field.

Cards are stored as JSON objects tagged by ``type``; anything else is
plain text. Decoding happens once, when a message leaves the store.
"""

from __future__ import annotations

import time
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from aicompass.catalog.models import LLMEntry, ToolEntry

Role = Literal["user", "ai"]


class PlainText(BaseModel):
    type: Literal["text"] = "text"
    text: str


class WelcomeMenu(BaseModel):
    type: Literal["welcome_menu"] = "welcome_menu"
    text: str
    options: list[str] = Field(default_factory=list)


class LLMSuggestions(BaseModel):
    type: Literal["llm_suggestions"] = "llm_suggestions"
    category: str
    models: list[LLMEntry]


class ToolSuggestions(BaseModel):
    type: Literal["tool_suggestions"] = "tool_suggestions"
    category: str
    tools: list[ToolEntry]


MessageContent = Annotated[
    Union[PlainText, WelcomeMenu, LLMSuggestions, ToolSuggestions],
    Field(discriminator="type"),
]

_card_adapter = TypeAdapter(
    Annotated[
        Union[WelcomeMenu, LLMSuggestions, ToolSuggestions],
        Field(discriminator="type"),
    ]
)


def encode_content(content: MessageContent) -> str:
    if isinstance(content, PlainText):
        return content.text
    return content.model_dump_json()


def decode_content(text: str) -> MessageContent:
    try:
        return _card_adapter.validate_json(text)
    except ValidationError:
        return PlainText(text=text)


def summarize_content(content: MessageContent) -> str:
    """Render content as text suitable for a chat model."""
    if isinstance(content, LLMSuggestions):
        models = "; ".join(f"{m.title}: {m.description}" for m in content.models)
        return f"Recommended LLMs for {content.category}: {models}"
    if isinstance(content, ToolSuggestions):
        tools = "; ".join(f"{t.name}: {t.description}" for t in content.tools)
        return f"Recommended tools for {content.category}: {tools}"
    return content.text


def now_ms() -> int:
    return int(time.time() * 1000)


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    text: str
    timestamp: int

    @classmethod
    def create(cls, role: Role, content: MessageContent | str, timestamp: int | None = None) -> Message:
        text = content if isinstance(content, str) else encode_content(content)
        return cls(role=role, text=text, timestamp=now_ms() if timestamp is None else timestamp)

    def decoded(self) -> MessageContent:
        return decode_content(self.text)
