import pytest
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models.function import AgentInfo, FunctionModel

from aicompass.categories import CODING, UNKNOWN_CATEGORY, WRITING
from aicompass.exceptions import ChatUnavailable
from aicompass.llms import ChatRelay, ChatTurn, Classifier
from aicompass.llms.relay import CHAT_SYSTEM_PROMPT, build_model_messages, normalize_role
from aicompass.llms.retry import RetryPolicy


async def _no_sleep(delay: float) -> None:
    pass


def answering(text: str) -> FunctionModel:
    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        return ModelResponse(parts=[TextPart(content=text)])

    return FunctionModel(respond)


def failing(status_code: int) -> FunctionModel:
    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        raise ModelHTTPError(status_code=status_code, model_name="test")

    return FunctionModel(respond)


def test_normalize_role():
    assert normalize_role("ai") == "assistant"
    assert normalize_role("assistant") == "assistant"
    assert normalize_role("user") == "user"
    assert normalize_role("system") == "system"
    assert normalize_role("narrator") == "user"


def test_build_model_messages():
    messages = build_model_messages(
        [
            ChatTurn(role="user", content="hi"),
            ChatTurn(role="ai", content="hello"),
            ChatTurn(role="narrator", content="psst"),
            ChatTurn(role="user", content="again"),
        ]
    )
    assert len(messages) == 3

    first, reply, last = messages
    assert isinstance(first, ModelRequest)
    assert isinstance(first.parts[0], SystemPromptPart)
    assert first.parts[0].content == CHAT_SYSTEM_PROMPT
    assert isinstance(first.parts[1], UserPromptPart)
    assert first.parts[1].content == "hi"

    assert isinstance(reply, ModelResponse)
    assert reply.parts[0].content == "hello"

    # The unknown role is sent as user and merged with the following turn
    assert isinstance(last, ModelRequest)
    assert [p.content for p in last.parts] == ["psst", "again"]
    assert all(isinstance(p, UserPromptPart) for p in last.parts)


async def test_classifier_uses_model_answer():
    classifier = Classifier(answering("Coding / Development"))
    assert await classifier.classify("anything") == CODING


async def test_classifier_empty_answer_is_unknown():
    classifier = Classifier(answering(""))
    assert await classifier.classify("summarize this") == UNKNOWN_CATEGORY
    assert await classifier.classify_for_recommendation("summarize this") == WRITING


async def test_classifier_unrecognized_answer_falls_back():
    classifier = Classifier(answering("Cooking"))
    assert await classifier.classify("write my python code") == CODING


async def test_classifier_without_model():
    classifier = Classifier(None)
    assert await classifier.classify("summarize this document") == WRITING


@pytest.mark.parametrize("status_code", [400, 429, 503])
async def test_classifier_never_raises(status_code):
    classifier = Classifier(failing(status_code), RetryPolicy(sleep=_no_sleep))
    assert await classifier.classify("debug this script") == CODING


async def test_relay_reply():
    seen: list[list[ModelMessage]] = []

    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        seen.append(messages)
        return ModelResponse(parts=[TextPart(content="Sure!")])

    relay = ChatRelay(FunctionModel(respond))
    assert await relay.reply([ChatTurn(role="user", content="help me")]) == "Sure!"
    assert len(seen) == 1


async def test_relay_unavailable():
    with pytest.raises(ChatUnavailable):
        await ChatRelay(None).reply([ChatTurn(role="user", content="hi")])

    relay = ChatRelay(failing(503), RetryPolicy(sleep=_no_sleep))
    with pytest.raises(ChatUnavailable):
        await relay.reply([ChatTurn(role="user", content="hi")])
