"""Gradio UI for AI Compass."""

import gradio as gr

from aicompass.config import get_config
from aicompass.ui.components.backend_config_page import create_backend_config_page
from aicompass.ui.components.conversation_page import create_conversation_page
from aicompass.ui.models import BackendConfig


def create_ui() -> gr.Blocks:
    """Create the UI.

    Returns:
        A Gradio Blocks component for the UI.
    """
    with gr.Blocks(title="AI Compass") as app:
        backend_config = gr.State(BackendConfig(api_url=get_config().backend_url).model_dump())

        with gr.Tabs():
            with gr.TabItem("Conversation", id=0):
                create_conversation_page(backend_config)

            with gr.TabItem("Backend Config", id=1):
                create_backend_config_page(backend_config)

    return app


def main():
    """Run the UI."""
    app = create_ui()
    app.launch(inbrowser=True)


if __name__ == "__main__":
    main()
