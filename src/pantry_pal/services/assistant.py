"""Conversational assistant that turns chat replies into pantry updates."""

import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from pantry_pal.domain.actions import PantryAction
from pantry_pal.services.action_parser import parse_action, strip_action_json
from pantry_pal.services.pantry import (
    ActionContext,
    ActionOutcome,
    PantryActionExecutor,
    PantryService,
)

CONNECTION_FAILURE_MESSAGE = "I'm having trouble connecting right now. Please try again!"

SYSTEM_PROMPT = """You are Pantry Pal, a friendly and bubbly AI assistant for a pantry management app!

You help users manage their pantry ingredients and suggest recipes. You can add
ingredients, update quantities, edit or delete ingredients, answer questions
about the pantry, suggest recipes and give general cooking help.

When the user wants to change their pantry, reply conversationally and include
exactly one JSON object describing the change, using one of these shapes:
{"action": "add_ingredient", "name": "Rice", "quantity": 2, "unit": "cups", "category": "Grains", "expirationDate": "2025-01-31"}
{"action": "edit_ingredient", "name": "Rice", "newName": "Brown Rice", "quantity": 3, "unit": "cups", "category": "Grains", "expirationDate": "2025-02-28"}
{"action": "delete_ingredient", "name": "Rice"}
{"action": "update_quantity", "name": "Rice", "quantity": 1.5}
Only "action" and "name" are always required; omit fields you don't know.
Never include more than one JSON object and never nest objects.

Keep responses warm, concise and encouraging (1-3 sentences unless asked for a recipe).

Current pantry:
{pantry}"""

_logger = logging.getLogger(__name__)


class ChatClient(Protocol):
    """Interface for the chat completion model."""

    async def complete(
        self, *, messages: list[dict[str, str]], model: str, temperature: float
    ) -> str:
        """Return the assistant's raw text reply."""


class ConversationBusyError(RuntimeError):
    """Raised when a user sends a message while the previous one is processing."""


@dataclass(frozen=True)
class AssistantReply:
    """Outcome of a single chat turn."""

    text: str
    action: PantryAction | None = None
    outcome: ActionOutcome | None = None

    @property
    def messages(self) -> list[str]:
        """Messages to show the user, in order."""
        shown = [self.text] if self.text else []
        if self.outcome is not None:
            shown.append(self.outcome.message)
        return shown


def build_system_prompt(pantry_summary: str) -> str:
    return SYSTEM_PROMPT.replace("{pantry}", pantry_summary or "(empty)")


@dataclass
class AssistantService:
    """Runs chat turns and applies any pantry action the reply contains."""

    chat_client: ChatClient
    executor: PantryActionExecutor
    pantry_service: PantryService
    model: str
    temperature: float = 0.7
    history_limit: int = 20
    _histories: dict[UUID, list[dict[str, str]]] = field(
        default_factory=dict, init=False, repr=False
    )
    _busy: set[UUID] = field(default_factory=set, init=False, repr=False)

    async def handle_message(self, user_id: UUID, text: str) -> AssistantReply | None:
        """Send a user message and act on the reply.

        Returns ``None`` for blank messages.
        """
        if not text.strip():
            return None
        if user_id in self._busy:
            raise ConversationBusyError(
                f"A message is already being processed for user {user_id}"
            )
        self._busy.add(user_id)
        try:
            return await self._handle(user_id, text.strip())
        finally:
            self._busy.discard(user_id)

    def history(self, user_id: UUID) -> list[dict[str, str]]:
        """Return the user/assistant messages of the current conversation."""
        return list(self._histories.get(user_id, []))

    def clear_conversation(self, user_id: UUID) -> None:
        self._histories.pop(user_id, None)

    async def _handle(self, user_id: UUID, text: str) -> AssistantReply:
        history = self._histories.setdefault(user_id, [])
        history.append({"role": "user", "content": text})
        messages = [
            {"role": "system", "content": build_system_prompt(self._pantry_summary(user_id))},
            *history,
        ]
        try:
            response = await self.chat_client.complete(
                messages=messages, model=self.model, temperature=self.temperature
            )
        except Exception:
            _logger.exception("Chat completion failed")
            self._append(history, CONNECTION_FAILURE_MESSAGE)
            return AssistantReply(text=CONNECTION_FAILURE_MESSAGE)

        self._append(history, response)
        action = parse_action(response)
        if action is None:
            return AssistantReply(text=response.strip())

        outcome = self.executor.execute(action, ActionContext(user_id=user_id))
        self._append(history, outcome.message)
        return AssistantReply(
            text=strip_action_json(response), action=action, outcome=outcome
        )

    def _pantry_summary(self, user_id: UUID) -> str:
        try:
            return self.pantry_service.summarize(user_id)
        except Exception:
            _logger.exception("Failed to load pantry for prompt")
            return "(unavailable)"

    def _append(self, history: list[dict[str, str]], content: str) -> None:
        history.append({"role": "assistant", "content": content})
        if len(history) > self.history_limit:
            del history[: len(history) - self.history_limit]
