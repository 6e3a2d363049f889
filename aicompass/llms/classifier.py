from __future__ import annotations

from fastapi import Depends
from pydantic_ai.direct import model_request
from pydantic_ai.messages import ModelRequest, SystemPromptPart, UserPromptPart
from pydantic_ai.models import Model

from aicompass.categories import CATEGORIES, UNKNOWN_CATEGORY, fallback_classify, normalize_category
from aicompass.config import Config, get_config
from aicompass.llms.models import get_default_model, response_text
from aicompass.llms.retry import RetryPolicy
from aicompass.log import logger

CLASSIFICATION_SYSTEM_PROMPT = f"""
You are a task classification assistant. Your job is to read a user's prompt and assign it one of these {len(CATEGORIES)} categories only:

{chr(10).join(f"{i}. {c}" for i, c in enumerate(CATEGORIES, start=1))}

Return ONLY the name of the matching category. Do not explain your reasoning.
""".strip()


def get_classifier(
    config: Config = Depends(get_config),
    model: Model | None = Depends(get_default_model),
) -> Classifier:
    return Classifier(model, RetryPolicy.from_config(config))


class Classifier:
    """Assigns a prompt to one of the fixed categories.

    The upstream model is asked first; any failure falls back to keyword
    matching, so ``classify`` never raises.
    """

    def __init__(self, model: Model | None, retry_policy: RetryPolicy | None = None) -> None:
        self.model = model
        self.retry_policy = retry_policy or RetryPolicy()

    async def classify(self, prompt: str) -> str:
        """Return a category label, or ``"Unknown"`` when the model answered nothing."""
        if self.model is None:
            logger.info("No classification model configured, using keyword fallback")
            return fallback_classify(prompt)

        messages = [
            ModelRequest(
                parts=[
                    SystemPromptPart(content=CLASSIFICATION_SYSTEM_PROMPT),
                    UserPromptPart(content=prompt),
                ]
            )
        ]
        try:
            response = await self.retry_policy.call(lambda: model_request(self.model, messages))
        except Exception as e:
            logger.warning(f"Classification model unavailable, falling back: {e}")
            return fallback_classify(prompt)

        answer = response_text(response)
        category = normalize_category(answer)
        if category is None:
            logger.info(f"Model answered an unknown label {answer!r}, using keyword fallback")
            return fallback_classify(prompt)

        logger.debug(f"Classified {prompt[:50]!r} as {category}")
        return category

    async def classify_for_recommendation(self, prompt: str) -> str:
        """Like ``classify`` but always lands on one of the fixed categories."""
        category = await self.classify(prompt)
        if category == UNKNOWN_CATEGORY:
            return fallback_classify(prompt)
        return category
