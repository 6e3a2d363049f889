"""Conversation list component for the AI Compass UI."""

from typing import Any, Dict, List, Optional, Tuple

import gradio as gr

from aicompass.ui.api_client import AICompassAPIClient
from aicompass.ui.models import BackendConfig


def to_choices(conversations: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Turn a conversation listing into (name, id) radio choices."""
    return [(conv["name"], conv["conversation_id"]) for conv in conversations["datas"]]


async def create_conversation(config: Dict[str, Any], name: Optional[str] = None) -> Dict[str, Any]:
    """Create a new conversation.

    Args:
        config: The backend configuration.
        name: Optional conversation name.

    Returns:
        The conversation info of the new conversation.
    """
    client = AICompassAPIClient.from_config(BackendConfig(**config))
    try:
        return await client.create_conversation(name)
    except Exception as e:
        raise gr.Error(f"Failed to create conversation: {str(e)}")
    finally:
        await client.close()


async def get_conversations(config: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Get the list of conversations.

    Args:
        config: The backend configuration.

    Returns:
        The list of conversations as (name, id) tuples.
    """
    client = AICompassAPIClient.from_config(BackendConfig(**config))
    try:
        return to_choices(await client.get_conversations())
    except Exception as e:
        raise gr.Error(f"Failed to get conversations: {str(e)}")
    finally:
        await client.close()


async def load_conversation(conversation_id: str, config: Dict[str, Any]) -> Dict[str, Any]:
    client = AICompassAPIClient.from_config(BackendConfig(**config))
    try:
        return await client.get_conversation_info(conversation_id)
    except Exception as e:
        raise gr.Error(f"Failed to load conversation: {str(e)}")
    finally:
        await client.close()


def create_conversation_list() -> Tuple[gr.Button, gr.Radio]:
    """Create the conversation list component.

    Returns:
        A tuple of (new_chat_button, conversation_list).
    """
    gr.Markdown("### Conversations")
    new_chat_btn = gr.Button("New Chat", variant="primary")

    # Labels are names, values are conversation IDs
    conversation_list = gr.Radio(
        choices=[],
        label="Select a conversation",
        type="value",
        interactive=True,
    )

    return new_chat_btn, conversation_list
