class AICompassError(Exception):
    pass


class ConversationNotFound(AICompassError):
    def __init__(self, conversation_id: str) -> None:
        super().__init__(f"Conversation {conversation_id} not found")
        self.conversation_id = conversation_id


class ChatUnavailable(AICompassError):
    pass


class CatalogError(AICompassError):
    pass
