"""Chat interface component for the AI Compass UI."""

from typing import Any, Dict, List, Tuple

import gradio as gr

from aicompass.log import logger
from aicompass.ui.api_client import AICompassAPIClient
from aicompass.ui.message_renderer import to_chat_history
from aicompass.ui.models import BackendConfig, ConversationState

# Button label and how it is delivered: typed text or a named action
CONFIRM_BUTTONS: List[Tuple[str, str]] = [("Yes", "yes"), ("No", "no")]
ACTION_BUTTONS: List[Tuple[str, str]] = [
    ("Show More LLMs", "show_more"),
    ("I Have Preferences", "preferences"),
    ("Related Tools", "tools"),
    ("More Tools", "more_tools"),
    ("Done", "done"),
]

CONFIRM_STAGE = "awaitStartConfirm"


def button_updates(state: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Visibility of the confirm buttons, then the action buttons, for a conversation state."""
    stage = state.get("stage")
    actions = set(state.get("actions") or [])
    confirm = [gr.update(visible=stage == CONFIRM_STAGE) for _ in CONFIRM_BUTTONS]
    action = [gr.update(visible=value in actions) for _, value in ACTION_BUTTONS]
    return confirm + action


def apply_reply(state: Dict[str, Any], reply: Dict[str, Any]) -> Dict[str, Any]:
    """Fold a session reply into the conversation state."""
    current = ConversationState(**state)
    current.stage = reply["stage"]
    current.actions = reply["actions"]
    current.messages = current.messages + reply["messages"]
    return current.model_dump()


async def send_text(
    text: str,
    state: Dict[str, Any],
    config: Dict[str, Any],
) -> Tuple[List[Dict[str, str]], Dict[str, Any]]:
    """Send user text to the current conversation.

    Args:
        text: The text to send.
        state: The conversation state.
        config: The backend configuration.

    Returns:
        A tuple of (chat_history, updated_state).
    """
    conversation_id = state.get("conversation_id")
    if not conversation_id:
        raise gr.Error("No conversation selected. Please create a new conversation first.")
    if not text.strip():
        return to_chat_history(state.get("messages", [])), state

    client = AICompassAPIClient.from_config(BackendConfig(**config))
    try:
        reply = await client.send_message(conversation_id, text)
    except Exception as e:
        logger.exception(e)
        raise gr.Error(f"Failed to send message: {str(e)}")
    finally:
        await client.close()

    state = apply_reply(state, reply)
    return to_chat_history(state["messages"]), state


async def press_action(
    action: str,
    state: Dict[str, Any],
    config: Dict[str, Any],
) -> Tuple[List[Dict[str, str]], Dict[str, Any]]:
    conversation_id = state.get("conversation_id")
    if not conversation_id:
        raise gr.Error("No conversation selected. Please create a new conversation first.")

    client = AICompassAPIClient.from_config(BackendConfig(**config))
    try:
        reply = await client.press_action(conversation_id, action)
    except Exception as e:
        logger.exception(e)
        raise gr.Error(f"Failed to perform action: {str(e)}")
    finally:
        await client.close()

    state = apply_reply(state, reply)
    return to_chat_history(state["messages"]), state


def create_chat_interface() -> Tuple[gr.Chatbot, gr.Textbox, gr.Button, List[gr.Button], List[gr.Button]]:
    """Create the chat interface component.

    Returns:
        A tuple of (chatbot, message_input, submit_button, confirm_buttons, action_buttons).
    """
    chatbot = gr.Chatbot(
        height=500,
        show_copy_button=True,
        render_markdown=True,
        type="messages",
    )

    with gr.Row():
        confirm_buttons = [gr.Button(label, visible=False, size="sm") for label, _ in CONFIRM_BUTTONS]
        action_buttons = [gr.Button(label, visible=False, size="sm") for label, _ in ACTION_BUTTONS]

    with gr.Row():
        with gr.Column(scale=8):
            msg = gr.Textbox(
                placeholder="Type a message...",
                show_label=False,
                container=False,
                scale=8,
            )
        with gr.Column(scale=1):
            submit_btn = gr.Button("Send", variant="primary")

    return chatbot, msg, submit_btn, confirm_buttons, action_buttons
