import pytest
from inline_snapshot import snapshot
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from aicompass.categories import CODING, WRITING
from aicompass.conversation.machine import (
    CLARIFY_TEXT,
    CLOSING_TEXT,
    PREFERENCES_TEXT,
    SWITCH_TO_CHAT_TEXT,
    TASK_PROMPT_TEXT,
    WELCOME_TEXT,
)
from aicompass.conversation.runner import SessionRegistry
from aicompass.llms import APOLOGY_TEXT
from aicompass.router.api.params import ConversationInfo, QueryConversations, SessionReply

API_BASE_URL = "/api/v1/conversation"


def create_conversation(client) -> ConversationInfo:
    response = client.post(
        f"{API_BASE_URL}/create",
    )
    assert response.status_code == 200
    return ConversationInfo.model_validate(response.json())


def send(client, conversation_id: str, text: str) -> SessionReply:
    response = client.post(f"{API_BASE_URL}/send/{conversation_id}", json={"text": text})
    assert response.status_code == 200
    return SessionReply.model_validate(response.json())


def press(client, conversation_id: str, action: str) -> SessionReply:
    response = client.post(f"{API_BASE_URL}/action/{conversation_id}", json={"action": action})
    assert response.status_code == 200
    return SessionReply.model_validate(response.json())


def test_crud_conversation(client):
    response = client.post(
        f"{API_BASE_URL}/delete/not-exists",
    )
    assert response.status_code == 404

    response = client.get(
        f"{API_BASE_URL}/info/not-exists",
    )
    assert response.status_code == 404

    response = client.get(
        f"{API_BASE_URL}/list",
    )
    assert response.status_code == 200
    response_data = QueryConversations.model_validate(response.json())
    assert len(response_data.datas) == 0

    info = create_conversation(client)
    assert info.name == "Chat 1"
    assert info.stage == "awaitStartConfirm"
    assert len(info.messages) == 1
    assert info.messages[0].role == "ai"
    assert info.messages[0].content.model_dump() == snapshot(
        {"type": "welcome_menu", "text": WELCOME_TEXT, "options": ["Yes", "No"]}
    )

    response = client.get(
        f"{API_BASE_URL}/list",
    )
    assert response.status_code == 200
    response_data = QueryConversations.model_validate(response.json())
    assert [c.conversation_id for c in response_data.datas] == [info.conversation_id]
    assert response_data.datas[0].messages is None

    response = client.post(f"{API_BASE_URL}/rename/{info.conversation_id}", json={"name": "Trip planning"})
    assert response.status_code == 200
    assert response.json()["name"] == "Trip planning"

    response = client.post(f"{API_BASE_URL}/rename/{info.conversation_id}", json={"name": ""})
    assert response.status_code == 422

    response = client.post(
        f"{API_BASE_URL}/delete/{info.conversation_id}",
    )
    assert response.status_code == 204
    response = client.get(
        f"{API_BASE_URL}/info/{info.conversation_id}",
    )
    assert response.status_code == 404
    response = client.post(f"{API_BASE_URL}/send/{info.conversation_id}", json={"text": "hi"})
    assert response.status_code == 404


def test_create_with_name(client):
    response = client.post(f"{API_BASE_URL}/create", json={"name": "My chat"})
    assert response.status_code == 200
    assert response.json()["name"] == "My chat"

    assert create_conversation(client).name == "Chat 2"


def test_conversations_are_per_user(client):
    info = create_conversation(client)

    response = client.get(f"{API_BASE_URL}/info/{info.conversation_id}", headers={"X-User-Id": "intruder"})
    assert response.status_code == 404

    response = client.get(f"{API_BASE_URL}/list", headers={"X-User-Id": "intruder"})
    assert response.json() == {"datas": []}


def test_empty_text_is_rejected(client):
    info = create_conversation(client)
    response = client.post(f"{API_BASE_URL}/send/{info.conversation_id}", json={"text": "   "})
    assert response.status_code == 400


def test_recommendation_flow(client):
    info = create_conversation(client)
    conversation_id = info.conversation_id

    reply = send(client, conversation_id, "yes")
    assert reply.stage == "awaitTaskPrompt"
    assert [(m.role, m.text) for m in reply.messages] == [("user", "yes"), ("ai", TASK_PROMPT_TEXT)]

    reply = send(client, conversation_id, "summarize this document")
    assert reply.stage == "awaitLLMAction"
    assert reply.actions == ["show_more", "preferences", "tools", "done"]
    user_message, card = reply.messages
    assert user_message.text == "summarize this document"
    assert card.content.type == "llm_suggestions"
    assert card.content.category == WRITING
    assert 1 <= len(card.content.models) <= 3

    reply = press(client, conversation_id, "tools")
    assert reply.stage == "awaitToolAction"
    assert reply.actions == ["more_tools", "done"]
    (card,) = reply.messages
    assert card.content.type == "tool_suggestions"
    assert card.content.category == WRITING
    assert len(card.content.tools) <= 3

    reply = press(client, conversation_id, "done")
    assert reply.stage == "idle"
    assert [m.text for m in reply.messages] == [CLOSING_TEXT]

    # Everything was persisted in order, cards decoded again
    response = client.get(f"{API_BASE_URL}/info/{conversation_id}")
    stored = ConversationInfo.model_validate(response.json())
    assert [m.content.type for m in stored.messages] == [
        "welcome_menu",
        "text",
        "text",
        "text",
        "llm_suggestions",
        "tool_suggestions",
        "text",
    ]
    timestamps = [m.timestamp for m in stored.messages]
    assert timestamps == sorted(timestamps)


def test_show_more_until_exhausted(client):
    conversation_id = create_conversation(client).conversation_id
    send(client, conversation_id, "yes")

    reply = send(client, conversation_id, "help me debug my code")
    first = reply.messages[-1].content
    assert first.category == CODING
    assert len(first.models) == 3

    reply = press(client, conversation_id, "show_more")
    (card,) = reply.messages
    assert {m.title for m in card.content.models}.isdisjoint({m.title for m in first.models})

    reply = press(client, conversation_id, "show_more")
    assert reply.messages == []
    assert reply.stage == "awaitLLMAction"


def test_actions_outside_their_stage_are_ignored(client):
    conversation_id = create_conversation(client).conversation_id

    reply = press(client, conversation_id, "show_more")
    assert reply.stage == "awaitStartConfirm"
    assert reply.messages == []

    response = client.post(f"{API_BASE_URL}/action/{conversation_id}", json={"action": "dance"})
    assert response.status_code == 422


def test_unclear_confirmation_then_no(client):
    conversation_id = create_conversation(client).conversation_id

    reply = send(client, conversation_id, "maybe")
    assert reply.stage == "awaitStartConfirm"
    assert reply.messages[-1].text == CLARIFY_TEXT

    reply = send(client, conversation_id, "No")
    assert reply.stage == "idle"
    assert reply.messages[-1].text == SWITCH_TO_CHAT_TEXT

    # Chat without a model answers with the apology
    reply = send(client, conversation_id, "tell me a joke")
    assert reply.stage == "idle"
    assert [m.text for m in reply.messages] == ["tell me a joke", APOLOGY_TEXT]


def test_session_resumes_as_chat(client):
    conversation_id = create_conversation(client).conversation_id
    SessionRegistry._instance = None

    response = client.get(f"{API_BASE_URL}/info/{conversation_id}")
    assert response.json()["stage"] == "idle"


class TestWithModel:
    @pytest.fixture
    def requests(self) -> list[list[ModelMessage]]:
        return []

    @pytest.fixture
    def chat_model(self, requests):
        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            requests.append(messages)
            prompt = messages[-1].parts[-1].content
            if prompt == "fix my stuff":
                return ModelResponse(parts=[TextPart(content=CODING)])
            if "Their preferences" in prompt:
                return ModelResponse(parts=[TextPart(content="Go with Codestral.")])
            return ModelResponse(parts=[TextPart(content="Here is a joke.")])

        return FunctionModel(respond)

    def test_preferences_are_compared(self, client, requests):
        conversation_id = create_conversation(client).conversation_id
        send(client, conversation_id, "yes")

        reply = send(client, conversation_id, "fix my stuff")
        assert reply.messages[-1].content.category == CODING

        reply = press(client, conversation_id, "preferences")
        assert reply.stage == "awaitLLMPreferences"
        assert reply.messages[-1].text == PREFERENCES_TEXT

        reply = send(client, conversation_id, "open weights")
        assert reply.stage == "awaitLLMAction"
        assert reply.messages[-1].text == "Go with Codestral."
        assert "open weights" in requests[-1][-1].parts[-1].content

    def test_free_chat_sends_history(self, client, requests):
        conversation_id = create_conversation(client).conversation_id
        send(client, conversation_id, "no")

        reply = send(client, conversation_id, "tell me a joke")
        assert [m.text for m in reply.messages] == ["tell me a joke", "Here is a joke."]

        # The welcome menu, the answer and the switch text were relayed as context
        history = requests[-1]
        assert any(isinstance(m, ModelResponse) for m in history)
        assert history[-1].parts[-1].content == "tell me a joke"
