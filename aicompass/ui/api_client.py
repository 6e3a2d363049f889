"""API client for the AI Compass UI."""

import logging
from typing import Any, Dict, Optional

import httpx

from aicompass.ui.models import BackendConfig

# Set up logging
logger = logging.getLogger(__name__)


class AICompassAPIClient:
    """API client for the AI Compass backend."""

    def __init__(self, base_url: str, api_token: Optional[str] = None, user_id: Optional[str] = None):
        """Initialize the API client.

        Args:
            base_url: The base URL of the API.
            api_token: Optional API token for authentication.
            user_id: Optional user identity forwarded to the backend.
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {"Authorization": f"Bearer {api_token}"} if api_token else {}
        if user_id:
            self.headers["X-User-Id"] = user_id
        self.client = httpx.AsyncClient(headers=self.headers, timeout=60)
        logger.info(f"Initialized API client with base URL: {base_url}")

    @classmethod
    def from_config(cls, config: BackendConfig) -> "AICompassAPIClient":
        return cls(config.api_url, config.api_token, config.user_id)

    async def test_connection(self) -> Dict[str, Any]:
        """Test the connection to the backend.

        Returns:
            The backend's greeting.
        """
        url = f"{self.base_url}/"
        logger.info(f"Making GET request to: {url}")
        response = await self.client.get(url)
        response.raise_for_status()
        return response.json()

    async def get_categories(self) -> Dict[str, Any]:
        url = f"{self.base_url}/api/config/categories"
        response = await self.client.get(url)
        response.raise_for_status()
        return response.json()

    async def create_conversation(self, name: Optional[str] = None) -> Dict[str, Any]:
        """Create a new conversation.

        Args:
            name: Optional conversation name, the backend picks one otherwise.

        Returns:
            The conversation info, including the welcome message.
        """
        url = f"{self.base_url}/api/v1/conversation/create"
        logger.info(f"Making POST request to: {url}")
        response = await self.client.post(url, json={"name": name} if name else None)
        response.raise_for_status()
        data = response.json()
        logger.info(f"Created conversation with ID: {data['conversation_id']}")
        return data

    async def get_conversations(self) -> Dict[str, Any]:
        """Get the list of conversations.

        Returns:
            A dictionary containing the conversations under ``datas``.
        """
        url = f"{self.base_url}/api/v1/conversation/list"
        logger.info(f"Making GET request to: {url}")
        response = await self.client.get(url)
        response.raise_for_status()
        data = response.json()
        logger.info(f"Retrieved {len(data.get('datas', []))} conversations")
        return data

    async def get_conversation_info(self, conversation_id: str) -> Dict[str, Any]:
        url = f"{self.base_url}/api/v1/conversation/info/{conversation_id}"
        logger.info(f"Making GET request to: {url}")
        response = await self.client.get(url)
        response.raise_for_status()
        return response.json()

    async def rename_conversation(self, conversation_id: str, name: str) -> Dict[str, Any]:
        url = f"{self.base_url}/api/v1/conversation/rename/{conversation_id}"
        logger.info(f"Making POST request to: {url}")
        response = await self.client.post(url, json={"name": name})
        response.raise_for_status()
        return response.json()

    async def delete_conversation(self, conversation_id: str) -> None:
        """Delete a conversation.

        Args:
            conversation_id: The ID of the conversation.
        """
        url = f"{self.base_url}/api/v1/conversation/delete/{conversation_id}"
        logger.info(f"Making POST request to: {url}")
        response = await self.client.post(url)
        response.raise_for_status()
        logger.info(f"Deleted conversation: {conversation_id}")

    async def send_message(self, conversation_id: str, text: str) -> Dict[str, Any]:
        """Send user text to a conversation.

        Args:
            conversation_id: The ID of the conversation.
            text: The message text.

        Returns:
            The session reply: new stage, available actions and appended messages.
        """
        url = f"{self.base_url}/api/v1/conversation/send/{conversation_id}"
        logger.info(f"Making POST request to: {url} with text: {text[:50]}...")
        response = await self.client.post(url, json={"text": text})
        response.raise_for_status()
        return response.json()

    async def press_action(self, conversation_id: str, action: str) -> Dict[str, Any]:
        url = f"{self.base_url}/api/v1/conversation/action/{conversation_id}"
        logger.info(f"Making POST request to: {url} with action: {action}")
        response = await self.client.post(url, json={"action": action})
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the client."""
        logger.info("Closing API client")
        await self.client.aclose()
