from aicompass.llms.classifier import Classifier, get_classifier
from aicompass.llms.relay import APOLOGY_TEXT, ChatRelay, ChatTurn, get_chat_relay

__all__ = [
    "APOLOGY_TEXT",
    "ChatRelay",
    "ChatTurn",
    "Classifier",
    "get_chat_relay",
    "get_classifier",
]
