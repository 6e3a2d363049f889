from __future__ import annotations

import asyncio
from collections import OrderedDict, deque
from dataclasses import dataclass, field

from aicompass.catalog import CatalogRepository
from aicompass.config import get_config
from aicompass.conversation.content import Message, summarize_content
from aicompass.conversation.machine import (
    Action,
    ActionPressed,
    ChatFailed,
    ChatReplied,
    Classified,
    Classify,
    ConversationStarted,
    Effect,
    Emit,
    Event,
    FetchLLMs,
    FetchTools,
    LLMsLoaded,
    RelayChat,
    RelayHistory,
    SessionState,
    Stage,
    StageMachine,
    ToolsLoaded,
    UserText,
)
from aicompass.exceptions import ChatUnavailable
from aicompass.llms import ChatRelay, ChatTurn, Classifier
from aicompass.log import logger
from aicompass.store import ConversationStore

SessionKey = tuple[str, str]


@dataclass
class Session:
    state: SessionState
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionRegistry:
    """
    Singleton holding the in-memory sessions of recently used conversations.

    At most ``max_sessions`` are kept; the least recently used idle ones are
    dropped first. A dropped conversation is restored from its stored
    messages the next time it is touched.
    """

    _instance: SessionRegistry | None = None

    @classmethod
    def get_instance(cls) -> SessionRegistry:
        if cls._instance is None:
            cls._instance = SessionRegistry(get_config().max_sessions)
        return cls._instance

    def __init__(self, max_sessions: int = 1024) -> None:
        self.max_sessions = max_sessions
        self.sessions: OrderedDict[SessionKey, Session] = OrderedDict()

    def get(self, user_id: str, conversation_id: str) -> Session | None:
        session = self.sessions.get((user_id, conversation_id))
        if session is not None:
            self.sessions.move_to_end((user_id, conversation_id))
        return session

    def open(self, user_id: str, conversation_id: str, state: SessionState) -> Session:
        session = self.get(user_id, conversation_id)
        if session is None:
            session = self.sessions[(user_id, conversation_id)] = Session(state=state)
            self._evict()
        return session

    def _evict(self) -> None:
        # Sessions in the middle of a dispatch are never dropped
        for key in list(self.sessions):
            if len(self.sessions) <= self.max_sessions:
                break
            if not self.sessions[key].lock.locked():
                del self.sessions[key]
                logger.debug(f"Evicted session {key[1]}")

    def discard(self, user_id: str, conversation_id: str) -> None:
        self.sessions.pop((user_id, conversation_id), None)


def get_session_registry() -> SessionRegistry:
    return SessionRegistry.get_instance()


class SessionRunner:
    """Drives one conversation's stage machine.

    Effects are interpreted here and their results are fed back as events
    until the machine settles. Every dispatch holds the session lock, so
    rapid repeated sends or clicks are handled one after another and always
    see the latest state.
    """

    def __init__(
        self,
        user_id: str,
        conversation_id: str,
        *,
        store: ConversationStore,
        registry: SessionRegistry,
        machine: StageMachine,
        classifier: Classifier,
        relay: ChatRelay,
        catalog: CatalogRepository,
    ) -> None:
        self.user_id = user_id
        self.conversation_id = conversation_id
        self.store = store
        self.registry = registry
        self.machine = machine
        self.classifier = classifier
        self.relay = relay
        self.catalog = catalog

    async def session(self) -> Session:
        session = self.registry.get(self.user_id, self.conversation_id)
        if session is not None:
            return session

        # Sessions are not persisted; a conversation with history resumes as free chat
        has_messages = await self.store.has_messages(self.user_id, self.conversation_id)
        state = SessionState(stage=Stage.IDLE if has_messages else Stage.ONBOARDING)
        return self.registry.open(self.user_id, self.conversation_id, state)

    async def stage(self) -> Stage:
        return (await self.session()).state.stage

    async def start(self) -> list[Message]:
        return await self._dispatch(ConversationStarted())

    async def send_text(self, text: str) -> list[Message]:
        user_message = Message.create("user", text)
        return await self._dispatch(UserText(text=text), user_message)

    async def press(self, action: Action) -> list[Message]:
        return await self._dispatch(ActionPressed(action=action))

    async def _dispatch(self, event: Event, user_message: Message | None = None) -> list[Message]:
        session = await self.session()
        async with session.lock:
            appended: list[Message] = []
            if user_message is not None:
                await self._append(user_message, appended)

            # The session only moves on once every effect has been carried out
            state = session.state
            queue: deque[Event] = deque([event])
            while queue:
                transition = self.machine.transition(state, queue.popleft())
                state = transition.state
                for effect in transition.effects:
                    follow_up = await self._perform(effect, appended)
                    if follow_up is not None:
                        queue.append(follow_up)
            session.state = state
            return appended

    async def _append(self, message: Message, appended: list[Message]) -> None:
        await self.store.append(self.user_id, self.conversation_id, message)
        appended.append(message)

    async def _perform(self, effect: Effect, appended: list[Message]) -> Event | None:
        if isinstance(effect, Emit):
            await self._append(Message.create("ai", effect.content), appended)
            return None
        if isinstance(effect, Classify):
            return Classified(category=await self.classifier.classify_for_recommendation(effect.prompt))
        # Catalog reads touch the filesystem, keep them off the event loop
        if isinstance(effect, FetchLLMs):
            return LLMsLoaded(entries=await asyncio.to_thread(self.catalog.llms_for, effect.category))
        if isinstance(effect, FetchTools):
            return ToolsLoaded(entries=await asyncio.to_thread(self.catalog.tools_for, effect.category))
        if isinstance(effect, RelayChat):
            return await self._relay(list(effect.turns))
        if isinstance(effect, RelayHistory):
            conversation = await self.store.get(self.user_id, self.conversation_id)
            turns = [
                ChatTurn(role=message.role, content=summarize_content(message.decoded()))
                for message in conversation.messages
            ]
            return await self._relay(turns)
        raise TypeError(f"Unsupported effect: {effect!r}")

    async def _relay(self, turns: list[ChatTurn]) -> Event:
        try:
            return ChatReplied(text=await self.relay.reply(turns))
        except ChatUnavailable as e:
            logger.warning(f"Chat relay failed for conversation {self.conversation_id}: {e}")
            return ChatFailed()
