from aicompass.ui.models.conversation import BackendConfig, ConversationState

__all__ = ["BackendConfig", "ConversationState"]
