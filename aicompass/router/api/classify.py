from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError

from aicompass.exceptions import ChatUnavailable
from aicompass.llms import APOLOGY_TEXT, ChatRelay, ChatTurn, Classifier, get_chat_relay, get_classifier
from aicompass.log import logger
from aicompass.router.api.params import ChatRelayResponse, ClassifyResponse, ErrorResponse

router = APIRouter(
    tags=["classify"],
    prefix="/api",
)

_turns_adapter = TypeAdapter(list[ChatTurn])


def _error(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(ErrorResponse(error=message).model_dump(), status_code=status_code)


@router.post(
    "/classify",
    responses={400: {"model": ErrorResponse}, 503: {"model": ChatRelayResponse}},
)
async def classify(
    request: Request,
    classifier: Classifier = Depends(get_classifier),
    relay: ChatRelay = Depends(get_chat_relay),
):
    """Classify ``{prompt}`` into a category, or relay ``{messages}`` to the chat model."""
    try:
        body = await request.json()
    except ValueError:
        return _error("Invalid JSON payload")

    if not isinstance(body, dict):
        return _error("Must provide { prompt } or { messages }")

    if isinstance(body.get("prompt"), str):
        category = await classifier.classify(body["prompt"])
        return ClassifyResponse(category=category)

    if isinstance(body.get("messages"), list):
        try:
            turns = _turns_adapter.validate_python(body["messages"])
        except ValidationError as e:
            logger.info(f"Rejected chat payload: {e}")
            return _error("Invalid messages payload")

        try:
            text = await relay.reply(turns)
        except ChatUnavailable:
            return JSONResponse(
                ChatRelayResponse(text=APOLOGY_TEXT).model_dump(),
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return ChatRelayResponse(text=text)

    return _error("Must provide { prompt } or { messages }")
