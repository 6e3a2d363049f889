from __future__ import annotations

from functools import cache
from typing import Any

from fastapi import Depends
from pydantic import BaseModel, Field
from pydantic_ai.exceptions import UserError
from pydantic_ai.messages import ModelResponse, TextPart
from pydantic_ai.models import Model, infer_model

from aicompass.config import Config, get_config
from aicompass.log import logger

SUPPORTED_PROVIDERS = [
    "groq",
    "openai",
    "anthropic",
    "google-gla",
    "mistral",
]

KNOWN_MODELS = {
    "groq": ["meta-llama/llama-4-scout-17b-16e-instruct", "llama-3.3-70b-versatile"],
    "openai": ["gpt-4o", "gpt-4o-mini"],
    "anthropic": ["claude-3-5-sonnet-latest", "claude-3-5-haiku-latest"],
    "google-gla": ["gemini-1.5-pro", "gemini-1.5-flash"],
    "mistral": ["mistral-large-latest"],
}


class ModelInitParams(BaseModel):
    provider: str
    model_name: str
    model_kwargs: dict[str, Any] = Field(default_factory=dict)


def init_model(params: ModelInitParams) -> Model:
    if params.provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"Unsupported provider: {params.provider}")
    return infer_model(f"{params.provider}:{params.model_name}")


@cache
def _get_cached_model(provider: str, model_name: str) -> Model | None:
    try:
        return init_model(ModelInitParams(provider=provider, model_name=model_name))
    except (UserError, ImportError, ValueError) as e:
        logger.warning(f"Model {provider}:{model_name} is not available, keyword fallback only: {e}")
        return None


def get_default_model(config: Config = Depends(get_config)) -> Model | None:
    return _get_cached_model(config.model_provider, config.model_name)


def response_text(response: ModelResponse) -> str:
    return "".join(part.content for part in response.parts if isinstance(part, TextPart))
