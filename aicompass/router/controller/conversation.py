from __future__ import annotations

from collections.abc import Sequence

from fastapi import Depends, HTTPException, status

from aicompass.catalog import CatalogRepository
from aicompass.config import Config, get_config
from aicompass.conversation.content import Message
from aicompass.conversation.machine import STAGE_ACTIONS, Action, Stage, StageMachine
from aicompass.conversation.runner import SessionRegistry, SessionRunner, get_session_registry
from aicompass.exceptions import ConversationNotFound
from aicompass.llms import ChatRelay, Classifier, get_chat_relay, get_classifier
from aicompass.router.api.params import ConversationInfo, MessageInfo, QueryConversations, SessionReply
from aicompass.store import ConversationStore, get_conversation_store
from aicompass.users import User


def get_conversation_controller(
    store: ConversationStore = Depends(get_conversation_store),
    config: Config = Depends(get_config),
    registry: SessionRegistry = Depends(get_session_registry),
    classifier: Classifier = Depends(get_classifier),
    relay: ChatRelay = Depends(get_chat_relay),
) -> ConversationController:
    return ConversationController(store, config, registry, classifier, relay)


def to_message_info(message: Message) -> MessageInfo:
    return MessageInfo(
        role=message.role,
        text=message.text,
        timestamp=message.timestamp,
        content=message.decoded(),
    )


class ConversationController:
    def __init__(
        self,
        store: ConversationStore,
        config: Config,
        registry: SessionRegistry,
        classifier: Classifier,
        relay: ChatRelay,
    ) -> None:
        self.store = store
        self.config = config
        self.registry = registry
        self.classifier = classifier
        self.relay = relay

        self.machine = StageMachine(page_size=config.page_size, confirm_retry_limit=config.confirm_retry_limit)
        self.catalog = CatalogRepository.from_config(config)

    def get_runner(self, user: User, conversation_id: str) -> SessionRunner:
        return SessionRunner(
            user.user_id,
            conversation_id,
            store=self.store,
            registry=self.registry,
            machine=self.machine,
            classifier=self.classifier,
            relay=self.relay,
            catalog=self.catalog,
        )

    def _reply(self, stage: Stage, messages: Sequence[Message]) -> SessionReply:
        return SessionReply(
            stage=stage,
            actions=STAGE_ACTIONS.get(stage, []),
            messages=[to_message_info(m) for m in messages],
        )

    async def create_conversation(self, user: User, name: str | None) -> ConversationInfo:
        if not name:
            name = f"Chat {await self.store.count(user.user_id) + 1}"
        conversation_id = await self.store.create(user.user_id, name)

        runner = self.get_runner(user, conversation_id)
        await runner.start()
        return await self.get_conversation_info(user, conversation_id)

    async def get_conversations(self, user: User) -> QueryConversations:
        conversations = await self.store.list(user.user_id)
        return QueryConversations(
            datas=[
                ConversationInfo(
                    conversation_id=c.conversation_id,
                    name=c.name,
                    created_at=c.created_at,
                    messages=None,
                )
                for c in conversations
            ]
        )

    async def get_conversation_info(self, user: User, conversation_id: str) -> ConversationInfo:
        try:
            conversation = await self.store.get(user.user_id, conversation_id)
            stage = await self.get_runner(user, conversation_id).stage()
        except ConversationNotFound:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")

        return ConversationInfo(
            conversation_id=conversation.conversation_id,
            name=conversation.name,
            created_at=conversation.created_at,
            stage=stage,
            actions=STAGE_ACTIONS.get(stage, []),
            messages=[to_message_info(m) for m in conversation.messages],
        )

    async def rename_conversation(self, user: User, conversation_id: str, name: str) -> ConversationInfo:
        try:
            await self.store.rename(user.user_id, conversation_id, name)
        except ConversationNotFound:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
        return await self.get_conversation_info(user, conversation_id)

    async def delete_conversation(self, user: User, conversation_id: str) -> None:
        try:
            await self.store.delete(user.user_id, conversation_id)
        except ConversationNotFound:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
        self.registry.discard(user.user_id, conversation_id)

    async def send_message(self, user: User, conversation_id: str, text: str) -> SessionReply:
        if not text.strip():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message text must not be empty")

        runner = self.get_runner(user, conversation_id)
        try:
            messages = await runner.send_text(text)
            stage = await runner.stage()
        except ConversationNotFound:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
        return self._reply(stage, messages)

    async def press_action(self, user: User, conversation_id: str, action: Action) -> SessionReply:
        runner = self.get_runner(user, conversation_id)
        try:
            messages = await runner.press(action)
            stage = await runner.stage()
        except ConversationNotFound:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
        return self._reply(stage, messages)
