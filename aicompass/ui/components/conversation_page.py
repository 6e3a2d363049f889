"""Conversation page component for the AI Compass UI."""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import gradio as gr

from aicompass.ui.api_client import AICompassAPIClient
from aicompass.ui.components.chat_interface import (
    ACTION_BUTTONS,
    CONFIRM_BUTTONS,
    button_updates,
    create_chat_interface,
    press_action,
    send_text,
)
from aicompass.ui.components.conversation_list import (
    create_conversation,
    create_conversation_list,
    get_conversations,
    load_conversation,
)
from aicompass.ui.message_renderer import to_chat_history
from aicompass.ui.models import BackendConfig, ConversationState

ChatHandler = Callable[[Dict[str, Any], Dict[str, Any]], Awaitable[Tuple[List[Dict[str, str]], Dict[str, Any]]]]


async def check_server_connection(config: Dict[str, Any]) -> Tuple[bool, str]:
    """Check if the server is reachable.

    Args:
        config: The backend configuration.

    Returns:
        A tuple of (is_connected, message).
    """
    backend = BackendConfig(**config)
    client = AICompassAPIClient.from_config(backend)
    try:
        await client.test_connection()
        return True, ""
    except Exception:
        return False, f"Cannot connect to server at {backend.api_url}. Please check your backend configuration."
    finally:
        await client.close()


async def refresh_conversations(config: Dict[str, Any]) -> Tuple[Dict, str, bool]:
    """Refresh the conversation list.

    Args:
        config: The backend configuration.

    Returns:
        A tuple of (conversation_list_update, connection_message, is_connected).
    """
    is_connected, error_message = await check_server_connection(config)
    if not is_connected:
        return gr.update(choices=[], value=None), f"⚠️ {error_message}", False

    conversations = await get_conversations(config)
    return gr.update(choices=conversations, value=None), "", True


async def new_conversation(connected: bool, config: Dict[str, Any]) -> Dict:
    """Create a conversation and select it in the list."""
    if not connected:
        raise gr.Error("Backend is not connected.")
    info = await create_conversation(config)
    conversations = await get_conversations(config)
    return gr.update(choices=conversations, value=info["conversation_id"])


def state_from_info(info: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not info:
        return ConversationState().model_dump()
    return ConversationState(
        conversation_id=info["conversation_id"],
        stage=info.get("stage"),
        actions=info.get("actions") or [],
        messages=info.get("messages") or [],
    ).model_dump()


async def select_conversation(
    conversation_id: Optional[str], config: Dict[str, Any]
) -> Tuple[List[Dict[str, str]], Dict[str, Any], str]:
    """Load the selected conversation.

    Returns:
        A tuple of (chat_history, conversation_state, conversation_name).
    """
    if not conversation_id:
        return [], state_from_info(None), ""
    info = await load_conversation(conversation_id, config)
    state = state_from_info(info)
    return to_chat_history(state["messages"]), state, info["name"]


async def rename_current(name: str, state: Dict[str, Any], config: Dict[str, Any]) -> Dict:
    conversation_id = state.get("conversation_id")
    if not conversation_id:
        raise gr.Error("No conversation selected.")
    if not name.strip():
        raise gr.Error("Name must not be empty.")

    client = AICompassAPIClient.from_config(BackendConfig(**config))
    try:
        await client.rename_conversation(conversation_id, name.strip())
    except Exception as e:
        raise gr.Error(f"Failed to rename conversation: {str(e)}")
    finally:
        await client.close()
    return gr.update(choices=await get_conversations(config), value=conversation_id)


async def delete_current(state: Dict[str, Any], config: Dict[str, Any]) -> Dict:
    conversation_id = state.get("conversation_id")
    if not conversation_id:
        raise gr.Error("No conversation selected.")

    client = AICompassAPIClient.from_config(BackendConfig(**config))
    try:
        await client.delete_conversation(conversation_id)
    except Exception as e:
        raise gr.Error(f"Failed to delete conversation: {str(e)}")
    finally:
        await client.close()
    return gr.update(choices=await get_conversations(config), value=None)


def text_handler(text: str) -> ChatHandler:
    async def handler(state: Dict[str, Any], config: Dict[str, Any]):
        return await send_text(text, state, config)

    return handler


def action_handler(action: str) -> ChatHandler:
    async def handler(state: Dict[str, Any], config: Dict[str, Any]):
        return await press_action(action, state, config)

    return handler


def create_conversation_page(backend_config: gr.State) -> gr.Blocks:
    """Create the conversation page.

    Args:
        backend_config: The shared backend configuration state.

    Returns:
        A Gradio Blocks component for the conversation page.
    """
    with gr.Blocks() as conversation_page:
        gr.Markdown("# Conversation")

        # Connection status
        connection_status = gr.Markdown("")

        with gr.Row():
            with gr.Column(scale=1):
                new_chat_btn, conversation_list = create_conversation_list()
                refresh_btn = gr.Button("Refresh", variant="secondary")

                with gr.Accordion("Manage", open=False):
                    conversation_name = gr.Textbox(label="Name")
                    rename_btn = gr.Button("Rename", size="sm")
                    delete_btn = gr.Button("Delete", variant="stop", size="sm")

            with gr.Column(scale=3):
                chatbot, msg, submit_btn, confirm_buttons, action_buttons = create_chat_interface()

        # State variables
        conversation_state = gr.State(ConversationState().model_dump())
        is_connected = gr.State(False)
        stage_buttons = confirm_buttons + action_buttons

        # Event handlers
        conversation_page.load(
            fn=refresh_conversations,
            inputs=[backend_config],
            outputs=[conversation_list, connection_status, is_connected],
        )
        refresh_btn.click(
            fn=refresh_conversations,
            inputs=[backend_config],
            outputs=[conversation_list, connection_status, is_connected],
        )

        new_chat_btn.click(
            fn=new_conversation,
            inputs=[is_connected, backend_config],
            outputs=[conversation_list],
        )

        conversation_list.change(
            fn=select_conversation,
            inputs=[conversation_list, backend_config],
            outputs=[chatbot, conversation_state, conversation_name],
        ).then(
            fn=button_updates,
            inputs=[conversation_state],
            outputs=stage_buttons,
        )

        rename_btn.click(
            fn=rename_current,
            inputs=[conversation_name, conversation_state, backend_config],
            outputs=[conversation_list],
        )
        delete_btn.click(
            fn=delete_current,
            inputs=[conversation_state, backend_config],
            outputs=[conversation_list],
        )

        # Sending is disabled until the reply arrives
        for trigger in (submit_btn.click, msg.submit):
            trigger(
                fn=lambda: (gr.update(interactive=False), gr.update(interactive=False)),
                outputs=[submit_btn, msg],
            ).then(
                fn=send_text,
                inputs=[msg, conversation_state, backend_config],
                outputs=[chatbot, conversation_state],
            ).then(
                fn=button_updates,
                inputs=[conversation_state],
                outputs=stage_buttons,
            ).then(
                fn=lambda: (gr.update(interactive=True), gr.update(value="", interactive=True)),
                outputs=[submit_btn, msg],
            )

        handlers = [text_handler(value) for _, value in CONFIRM_BUTTONS]
        handlers += [action_handler(value) for _, value in ACTION_BUTTONS]
        for button, handler in zip(stage_buttons, handlers):
            button.click(
                fn=handler,
                inputs=[conversation_state, backend_config],
                outputs=[chatbot, conversation_state],
            ).then(
                fn=button_updates,
                inputs=[conversation_state],
                outputs=stage_buttons,
            )

    return conversation_page
