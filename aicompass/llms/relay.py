from __future__ import annotations

from collections.abc import Sequence

from fastapi import Depends
from pydantic import BaseModel
from pydantic_ai.direct import model_request
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models import Model

from aicompass.config import Config, get_config
from aicompass.exceptions import ChatUnavailable
from aicompass.llms.models import get_default_model, response_text
from aicompass.llms.retry import RetryPolicy
from aicompass.log import logger

CHAT_SYSTEM_PROMPT = "You are a helpful AI assistant."
APOLOGY_TEXT = "⚠️ Sorry, the chat service is currently unavailable. Please try again later."


class ChatTurn(BaseModel):
    role: str
    content: str


def normalize_role(role: str) -> str:
    """Map an internal role onto the provider's vocabulary.

    Unrecognized roles are sent as ``user``.
    """
    if role in ("ai", "assistant"):
        return "assistant"
    if role in ("user", "system"):
        return role
    logger.warning(f"Unknown chat role {role!r}, sending it as 'user'")
    return "user"


def build_model_messages(turns: Sequence[ChatTurn], system_prompt: str = CHAT_SYSTEM_PROMPT) -> list[ModelMessage]:
    messages: list[ModelMessage] = [ModelRequest(parts=[SystemPromptPart(content=system_prompt)])]
    for turn in turns:
        role = normalize_role(turn.role)
        if role == "assistant":
            messages.append(ModelResponse(parts=[TextPart(content=turn.content)]))
            continue

        part = SystemPromptPart(content=turn.content) if role == "system" else UserPromptPart(content=turn.content)
        last = messages[-1]
        if isinstance(last, ModelRequest):
            # Consecutive requests are merged into one
            messages[-1] = ModelRequest(parts=[*last.parts, part])
        else:
            messages.append(ModelRequest(parts=[part]))
    return messages


def get_chat_relay(
    config: Config = Depends(get_config),
    model: Model | None = Depends(get_default_model),
) -> ChatRelay:
    return ChatRelay(model, RetryPolicy.from_config(config))


class ChatRelay:
    def __init__(self, model: Model | None, retry_policy: RetryPolicy | None = None) -> None:
        self.model = model
        self.retry_policy = retry_policy or RetryPolicy()

    async def reply(self, turns: Sequence[ChatTurn]) -> str:
        if self.model is None:
            raise ChatUnavailable("No chat model configured")

        messages = build_model_messages(turns)
        try:
            response = await self.retry_policy.call(lambda: model_request(self.model, messages))
        except Exception as e:
            logger.error(f"Chat model unavailable: {e}")
            raise ChatUnavailable(str(e)) from e
        return response_text(response)
