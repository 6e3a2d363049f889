"""Conversation models for the AI Compass UI."""

from typing import Any

from pydantic import BaseModel, Field


class BackendConfig(BaseModel):
    """Where the UI finds the backend and who it acts as."""

    api_url: str = "http://localhost:9772"
    api_token: str | None = None
    user_id: str | None = None


class ConversationState(BaseModel):
    """Conversation state model."""

    conversation_id: str | None = None
    stage: str | None = None
    actions: list[str] = Field(default_factory=list)
    messages: list[dict[str, Any]] = Field(default_factory=list)
