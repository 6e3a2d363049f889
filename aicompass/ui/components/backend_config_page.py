"""Backend configuration page component for the AI Compass UI."""

from typing import Any, Dict, Optional, Tuple

import gradio as gr

from aicompass.ui.api_client import AICompassAPIClient
from aicompass.ui.models import BackendConfig


async def test_connection(url: str, token: Optional[str] = None, user_id: Optional[str] = None) -> str:
    """Test the connection to the backend.

    Args:
        url: The URL of the backend.
        token: Optional API token.
        user_id: Optional user identity.

    Returns:
        A status message.
    """
    client = AICompassAPIClient(url, token or None, user_id or None)
    try:
        categories = await client.get_categories()
        return f"Connection successful! Backend knows {len(categories['categories'])} categories."
    except Exception as e:
        return f"Connection failed: {str(e)}"
    finally:
        await client.close()


def save_config(url: str, token: Optional[str], user_id: Optional[str]) -> Tuple[Dict[str, Any], str]:
    config = BackendConfig(api_url=url, api_token=token or None, user_id=user_id or None)
    return config.model_dump(), f"Saved. Using backend at {config.api_url}."


def create_backend_config_page(backend_config: gr.State) -> gr.Blocks:
    """Create the backend configuration page.

    Args:
        backend_config: The shared backend configuration state.

    Returns:
        A Gradio Blocks component for the backend configuration page.
    """
    defaults = BackendConfig()
    with gr.Blocks() as backend_config_page:
        gr.Markdown("# Backend Configuration")

        with gr.Row():
            api_url = gr.Textbox(
                value=defaults.api_url,
                label="API URL",
            )
            api_token = gr.Textbox(
                label="API Token (Optional)",
                placeholder="Enter API token...",
                type="password",
            )
            user_id = gr.Textbox(
                label="User ID (Optional)",
                placeholder="Anonymous if empty",
            )

        with gr.Row():
            save_btn = gr.Button("Save", variant="primary")
            test_connection_btn = gr.Button("Test Connection", variant="secondary")

        connection_status = gr.Textbox(
            label="Connection Status",
            interactive=False,
        )

        # Event handlers
        save_btn.click(
            fn=save_config,
            inputs=[api_url, api_token, user_id],
            outputs=[backend_config, connection_status],
        )

        test_connection_btn.click(
            fn=test_connection,
            inputs=[api_url, api_token, user_id],
            outputs=[connection_status],
        )

    return backend_config_page
