from pydantic import BaseModel, Field

from aicompass.conversation.content import MessageContent
from aicompass.conversation.machine import Action, Stage


class GetCategoriesResponse(BaseModel):
    categories: list[str]
    page_size: int


class ClassifyResponse(BaseModel):
    category: str


class ChatRelayResponse(BaseModel):
    text: str


class ErrorResponse(BaseModel):
    error: str


class CreateConversationRequest(BaseModel):
    name: str | None = None


class RenameConversationRequest(BaseModel):
    name: str = Field(min_length=1)


class SendMessageRequest(BaseModel):
    text: str


class ActionRequest(BaseModel):
    action: Action


class MessageInfo(BaseModel):
    role: str
    text: str
    timestamp: int
    content: MessageContent


class ConversationInfo(BaseModel):
    conversation_id: str
    name: str
    created_at: int
    stage: Stage | None = None
    actions: list[Action] = Field(default_factory=list)
    messages: list[MessageInfo] | None = None


class QueryConversations(BaseModel):
    datas: list[ConversationInfo]


class SessionReply(BaseModel):
    stage: Stage
    actions: list[Action]
    messages: list[MessageInfo]
