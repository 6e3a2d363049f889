from fastapi import APIRouter, Depends, Response, status

from aicompass.router.api.params import (
    ActionRequest,
    ConversationInfo,
    CreateConversationRequest,
    QueryConversations,
    RenameConversationRequest,
    SendMessageRequest,
    SessionReply,
)
from aicompass.router.controller.conversation import (
    ConversationController,
    get_conversation_controller,
)
from aicompass.users import User, get_current_user

router = APIRouter(
    tags=["conversation"],
    prefix="/api/v1/conversation",
)


@router.post("/create")
async def create_conversation(
    params: CreateConversationRequest | None = None,
    user: User = Depends(get_current_user),
    conversation_controller: ConversationController = Depends(get_conversation_controller),
) -> ConversationInfo:
    return await conversation_controller.create_conversation(user, params.name if params else None)


@router.get("/list")
async def get_conversations(
    user: User = Depends(get_current_user),
    conversation_controller: ConversationController = Depends(get_conversation_controller),
) -> QueryConversations:
    return await conversation_controller.get_conversations(user)


@router.get("/info/{conversation_id}")
async def get_conversation_info(
    conversation_id: str,
    user: User = Depends(get_current_user),
    conversation_controller: ConversationController = Depends(get_conversation_controller),
) -> ConversationInfo:
    return await conversation_controller.get_conversation_info(user, conversation_id)


@router.post("/rename/{conversation_id}")
async def rename_conversation(
    conversation_id: str,
    params: RenameConversationRequest,
    user: User = Depends(get_current_user),
    conversation_controller: ConversationController = Depends(get_conversation_controller),
) -> ConversationInfo:
    return await conversation_controller.rename_conversation(user, conversation_id, params.name)


@router.post("/delete/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: str,
    user: User = Depends(get_current_user),
    conversation_controller: ConversationController = Depends(get_conversation_controller),
) -> Response:
    await conversation_controller.delete_conversation(user, conversation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/send/{conversation_id}")
async def send_message(
    conversation_id: str,
    params: SendMessageRequest,
    user: User = Depends(get_current_user),
    conversation_controller: ConversationController = Depends(get_conversation_controller),
) -> SessionReply:
    return await conversation_controller.send_message(user, conversation_id, params.text)


@router.post("/action/{conversation_id}")
async def press_action(
    conversation_id: str,
    params: ActionRequest,
    user: User = Depends(get_current_user),
    conversation_controller: ConversationController = Depends(get_conversation_controller),
) -> SessionReply:
    return await conversation_controller.press_action(user, conversation_id, params.action)
