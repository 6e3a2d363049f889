"""Tests for the AI Compass UI API client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from aicompass.ui.api_client import AICompassAPIClient
from aicompass.ui.models import BackendConfig


@pytest.fixture
def mock_httpx_client():
    """Mock the httpx client."""
    with patch("httpx.AsyncClient") as mock_client:
        yield mock_client


def mock_response(data):
    response = MagicMock()
    response.json.return_value = data
    response.raise_for_status = MagicMock()
    return response


def test_headers(mock_httpx_client):
    """Token and user identity are sent on every request."""
    AICompassAPIClient.from_config(
        BackendConfig(api_url="http://example.com/", api_token="token", user_id="alice")
    )
    mock_httpx_client.assert_called_once_with(
        headers={"Authorization": "Bearer token", "X-User-Id": "alice"},
        timeout=60,
    )

    mock_httpx_client.reset_mock()
    client = AICompassAPIClient("http://example.com/")
    assert client.base_url == "http://example.com"
    mock_httpx_client.assert_called_once_with(headers={}, timeout=60)


@pytest.mark.asyncio
async def test_create_conversation(mock_httpx_client):
    """Test creating a conversation."""
    # Setup
    response = mock_response({"conversation_id": "test-id", "name": "Chat 1", "messages": []})
    mock_client_instance = AsyncMock()
    mock_client_instance.post.return_value = response
    mock_httpx_client.return_value = mock_client_instance

    # Execute
    client = AICompassAPIClient("http://localhost:9772")
    info = await client.create_conversation()

    # Assert
    assert info["conversation_id"] == "test-id"
    mock_client_instance.post.assert_called_once_with("http://localhost:9772/api/v1/conversation/create", json=None)
    response.raise_for_status.assert_called_once()

    await client.create_conversation("Named")
    mock_client_instance.post.assert_called_with(
        "http://localhost:9772/api/v1/conversation/create", json={"name": "Named"}
    )


@pytest.mark.asyncio
async def test_get_conversations(mock_httpx_client):
    """Test getting conversations."""
    response = mock_response({"datas": [{"conversation_id": "test-id", "name": "Chat 1", "created_at": 1}]})
    mock_client_instance = AsyncMock()
    mock_client_instance.get.return_value = response
    mock_httpx_client.return_value = mock_client_instance

    client = AICompassAPIClient("http://localhost:9772")
    conversations = await client.get_conversations()

    assert conversations["datas"][0]["conversation_id"] == "test-id"
    mock_client_instance.get.assert_called_once_with("http://localhost:9772/api/v1/conversation/list")
    response.raise_for_status.assert_called_once()


@pytest.mark.asyncio
async def test_send_message_and_press_action(mock_httpx_client):
    """Test sending text and pressing an action."""
    reply = {"stage": "awaitLLMAction", "actions": ["show_more"], "messages": []}
    mock_client_instance = AsyncMock()
    mock_client_instance.post.return_value = mock_response(reply)
    mock_httpx_client.return_value = mock_client_instance

    client = AICompassAPIClient("http://localhost:9772")
    assert await client.send_message("test-id", "fix my code") == reply
    mock_client_instance.post.assert_called_with(
        "http://localhost:9772/api/v1/conversation/send/test-id",
        json={"text": "fix my code"},
    )

    assert await client.press_action("test-id", "show_more") == reply
    mock_client_instance.post.assert_called_with(
        "http://localhost:9772/api/v1/conversation/action/test-id",
        json={"action": "show_more"},
    )


@pytest.mark.asyncio
async def test_rename_delete_and_close(mock_httpx_client):
    mock_client_instance = AsyncMock()
    mock_client_instance.post.return_value = mock_response({"name": "Renamed"})
    mock_httpx_client.return_value = mock_client_instance

    client = AICompassAPIClient("http://localhost:9772")
    assert (await client.rename_conversation("test-id", "Renamed"))["name"] == "Renamed"
    mock_client_instance.post.assert_called_with(
        "http://localhost:9772/api/v1/conversation/rename/test-id",
        json={"name": "Renamed"},
    )

    await client.delete_conversation("test-id")
    mock_client_instance.post.assert_called_with("http://localhost:9772/api/v1/conversation/delete/test-id")

    await client.close()
    mock_client_instance.aclose.assert_awaited_once()
