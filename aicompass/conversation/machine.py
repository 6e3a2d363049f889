"""The guided conversation as a pure state machine.

``StageMachine.transition`` maps a session state and an event to the next
state plus a list of effects. It performs no I/O; effects are carried out by
the session runner, which feeds their results back in as events.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Union

from aicompass.catalog import LLMEntry, ToolEntry, paginate
from aicompass.conversation.content import (
    LLMSuggestions,
    MessageContent,
    PlainText,
    ToolSuggestions,
    WelcomeMenu,
)
from aicompass.llms.relay import APOLOGY_TEXT, ChatTurn
from aicompass.log import logger

WELCOME_TEXT = (
    "👋 Welcome to AI Compass! I can help you find the right AI model or tool for your task. "
    "Would you like to get started?"
)
WELCOME_OPTIONS = ["Yes", "No"]
TASK_PROMPT_TEXT = "Great! Describe the task you want to get done and I'll suggest models that fit."
SWITCH_TO_CHAT_TEXT = "No problem. You can chat with me freely, just type your question."
CLARIFY_TEXT = 'Please answer "yes" to get recommendations or "no" to just chat.'
PREFERENCES_TEXT = (
    "Tell me what matters most to you (price, speed, open weights, privacy...) "
    "and I'll compare the suggested models for you."
)
CLOSING_TEXT = "Glad I could help! Ask me anything else, or start a new chat for another task."
NO_LLMS_TEXT = "I couldn't find any models for {category}."
NO_TOOLS_TEXT = "I couldn't find any tools for {category}."


class Stage(str, enum.Enum):
    IDLE = "idle"
    ONBOARDING = "onboarding"
    AWAIT_START_CONFIRM = "awaitStartConfirm"
    AWAIT_TASK_PROMPT = "awaitTaskPrompt"
    AWAIT_LLM_PREFERENCES = "awaitLLMPreferences"
    AWAIT_LLM_ACTION = "awaitLLMAction"
    AWAIT_TOOL_ACTION = "awaitToolAction"
    AWAIT_HUGGINGFACE_PROMPT = "awaitHuggingfacePrompt"


class Action(str, enum.Enum):
    SHOW_MORE = "show_more"
    PREFERENCES = "preferences"
    TOOLS = "tools"
    MORE_TOOLS = "more_tools"
    DONE = "done"


# Buttons the UI offers in each stage
STAGE_ACTIONS: dict[Stage, list[Action]] = {
    Stage.AWAIT_LLM_ACTION: [Action.SHOW_MORE, Action.PREFERENCES, Action.TOOLS, Action.DONE],
    Stage.AWAIT_TOOL_ACTION: [Action.MORE_TOOLS, Action.DONE],
}


@dataclass(frozen=True)
class SessionState:
    stage: Stage = Stage.ONBOARDING
    prompt: str | None = None
    category: str | None = None
    llm_offset: int = 0
    tool_offset: int = 0
    shown_models: tuple[str, ...] = ()
    confirm_attempts: int = 0


# Events


@dataclass(frozen=True)
class ConversationStarted:
    pass


@dataclass(frozen=True)
class UserText:
    text: str


@dataclass(frozen=True)
class ActionPressed:
    action: Action


@dataclass(frozen=True)
class Classified:
    category: str


@dataclass(frozen=True)
class LLMsLoaded:
    entries: Sequence[LLMEntry]


@dataclass(frozen=True)
class ToolsLoaded:
    entries: Sequence[ToolEntry]


@dataclass(frozen=True)
class ChatReplied:
    text: str


@dataclass(frozen=True)
class ChatFailed:
    pass


Event = Union[
    ConversationStarted,
    UserText,
    ActionPressed,
    Classified,
    LLMsLoaded,
    ToolsLoaded,
    ChatReplied,
    ChatFailed,
]

# Effects


@dataclass(frozen=True)
class Emit:
    content: MessageContent


@dataclass(frozen=True)
class Classify:
    prompt: str


@dataclass(frozen=True)
class FetchLLMs:
    category: str


@dataclass(frozen=True)
class FetchTools:
    category: str


@dataclass(frozen=True)
class RelayChat:
    turns: tuple[ChatTurn, ...]


@dataclass(frozen=True)
class RelayHistory:
    """Relay the whole stored conversation."""


Effect = Union[Emit, Classify, FetchLLMs, FetchTools, RelayChat, RelayHistory]


@dataclass(frozen=True)
class Transition:
    state: SessionState
    effects: list[Effect] = field(default_factory=list)


def emit_text(text: str) -> Emit:
    return Emit(PlainText(text=text))


def build_comparison_prompt(category: str | None, models: Sequence[str], preferences: str) -> str:
    listed = ", ".join(models) if models else "the models you would suggest"
    return (
        f"A user is choosing an AI model for a {category or 'general'} task. "
        f"The candidates are: {listed}. "
        f"Their preferences: {preferences.strip()}. "
        "Compare the candidates against these preferences and recommend the best fit, briefly explaining why."
    )


class StageMachine:
    def __init__(self, page_size: int = 3, confirm_retry_limit: int | None = None) -> None:
        self.page_size = page_size
        self.confirm_retry_limit = confirm_retry_limit

    def transition(self, state: SessionState, event: Event) -> Transition:
        if isinstance(event, ConversationStarted):
            result = self._on_started(state)
        elif isinstance(event, UserText):
            result = self._on_text(state, event.text)
        elif isinstance(event, ActionPressed):
            result = self._on_action(state, event.action)
        elif isinstance(event, Classified):
            result = self._on_classified(state, event.category)
        elif isinstance(event, LLMsLoaded):
            result = self._on_llms_loaded(state, event.entries)
        elif isinstance(event, ToolsLoaded):
            result = self._on_tools_loaded(state, event.entries)
        elif isinstance(event, ChatReplied):
            result = Transition(state, [emit_text(event.text.strip() or APOLOGY_TEXT)])
        elif isinstance(event, ChatFailed):
            result = Transition(state, [emit_text(APOLOGY_TEXT)])
        else:
            raise TypeError(f"Unsupported event: {event!r}")

        if result.state.stage != state.stage:
            logger.debug(f"Stage {state.stage.value} -> {result.state.stage.value} on {type(event).__name__}")
        return result

    def _on_started(self, state: SessionState) -> Transition:
        if state.stage != Stage.ONBOARDING:
            return Transition(state)
        return Transition(
            replace(state, stage=Stage.AWAIT_START_CONFIRM, confirm_attempts=0),
            [Emit(WelcomeMenu(text=WELCOME_TEXT, options=list(WELCOME_OPTIONS)))],
        )

    def _on_text(self, state: SessionState, text: str) -> Transition:
        stage = state.stage
        if stage == Stage.ONBOARDING:
            return self._on_started(state)

        if stage == Stage.AWAIT_START_CONFIRM:
            return self._on_confirm(state, text)

        if stage in (Stage.AWAIT_TASK_PROMPT, Stage.AWAIT_LLM_ACTION, Stage.AWAIT_TOOL_ACTION):
            return self._start_task(state, text)

        if stage == Stage.AWAIT_LLM_PREFERENCES:
            prompt = build_comparison_prompt(state.category, state.shown_models, text)
            return Transition(
                replace(state, stage=Stage.AWAIT_LLM_ACTION),
                [RelayChat(turns=(ChatTurn(role="user", content=prompt),))],
            )

        # idle, and the reserved huggingface stage, are free chat
        return Transition(replace(state, stage=Stage.IDLE), [RelayHistory()])

    def _on_confirm(self, state: SessionState, text: str) -> Transition:
        answer = text.strip().lower()
        if answer == "yes":
            return Transition(
                replace(state, stage=Stage.AWAIT_TASK_PROMPT, confirm_attempts=0),
                [emit_text(TASK_PROMPT_TEXT)],
            )
        if answer == "no":
            return Transition(
                replace(state, stage=Stage.IDLE, confirm_attempts=0),
                [emit_text(SWITCH_TO_CHAT_TEXT)],
            )

        attempts = state.confirm_attempts + 1
        if self.confirm_retry_limit is not None and attempts >= self.confirm_retry_limit:
            return Transition(
                replace(state, stage=Stage.IDLE, confirm_attempts=0),
                [emit_text(SWITCH_TO_CHAT_TEXT)],
            )
        return Transition(replace(state, confirm_attempts=attempts), [emit_text(CLARIFY_TEXT)])

    def _start_task(self, state: SessionState, text: str) -> Transition:
        return Transition(
            replace(
                state,
                stage=Stage.AWAIT_LLM_ACTION,
                prompt=text,
                category=None,
                llm_offset=0,
                tool_offset=0,
                shown_models=(),
            ),
            [Classify(prompt=text)],
        )

    def _on_action(self, state: SessionState, action: Action) -> Transition:
        if action not in STAGE_ACTIONS.get(state.stage, []) or state.category is None:
            logger.debug(f"Ignoring action {action.value} in stage {state.stage.value}")
            return Transition(state)

        if action == Action.DONE:
            return Transition(replace(state, stage=Stage.IDLE), [emit_text(CLOSING_TEXT)])
        if action == Action.SHOW_MORE:
            return Transition(state, [FetchLLMs(category=state.category)])
        if action == Action.PREFERENCES:
            return Transition(replace(state, stage=Stage.AWAIT_LLM_PREFERENCES), [emit_text(PREFERENCES_TEXT)])
        # tools and more_tools
        return Transition(replace(state, stage=Stage.AWAIT_TOOL_ACTION), [FetchTools(category=state.category)])

    def _on_classified(self, state: SessionState, category: str) -> Transition:
        if state.stage != Stage.AWAIT_LLM_ACTION:
            return Transition(state)
        return Transition(replace(state, category=category), [FetchLLMs(category=category)])

    def _on_llms_loaded(self, state: SessionState, entries: Sequence[LLMEntry]) -> Transition:
        batch, offset = paginate(entries, state.llm_offset, self.page_size)
        category = state.category or ""
        if batch:
            effects: list[Effect] = [Emit(LLMSuggestions(category=category, models=batch))]
        elif state.llm_offset == 0:
            effects = [emit_text(NO_LLMS_TEXT.format(category=category))]
        else:
            effects = []
        return Transition(
            replace(
                state,
                llm_offset=offset,
                shown_models=(*state.shown_models, *(m.title for m in batch)),
            ),
            effects,
        )

    def _on_tools_loaded(self, state: SessionState, entries: Sequence[ToolEntry]) -> Transition:
        batch, offset = paginate(entries, state.tool_offset, self.page_size)
        category = state.category or ""
        if batch:
            effects: list[Effect] = [Emit(ToolSuggestions(category=category, tools=batch))]
        elif state.tool_offset == 0:
            effects = [emit_text(NO_TOOLS_TEXT.format(category=category))]
        else:
            effects = []
        return Transition(replace(state, tool_offset=offset), effects)
