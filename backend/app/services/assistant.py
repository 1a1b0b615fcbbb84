"""
Conversational assistant for the chat screen.

``AssistantClient`` wraps a single chat-completion call behind a fixed
system instruction and a set of content-safety thresholds. Both are
configuration fixed at construction; callers only pass the turns.

``ConversationService`` persists turns and guarantees that at most one
assistant request is outstanding per conversation, so replies land in
the order their prompts were sent. A failed or blocked generation is
replaced by a fixed fallback message and never reaches the user raw.
"""

import asyncio
import logging
import time
import weakref
from typing import Any, Dict, List, Optional, Sequence, Tuple

from openai import AsyncOpenAI, OpenAIError
from sqlalchemy.orm import Session

from app import crud
from app.core.assistant_logger import get_assistant_logger
from app.core.config import Settings, settings as default_settings
from app.core.exceptions import GenerationFailed
from app.core.metrics import assistant_replies_total
from app.models.conversation import Conversation, ConversationMessage
from app.schemas.conversation import ConversationCreate

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_SYSTEM = "system"

AGENT_NAME = "ConversationAssistant"

# Minimum moderation score that blocks, per threshold level
THRESHOLD_SCORES: Dict[str, Optional[float]] = {
    "block_none": None,
    "block_only_high": 0.8,
    "block_medium_and_above": 0.5,
    "block_low_and_above": 0.2,
}

# Safety category -> moderation score attributes it covers
MODERATION_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "harassment": ("harassment", "harassment_threatening"),
    "hate_speech": ("hate", "hate_threatening"),
    "sexually_explicit": ("sexual", "sexual_minors"),
    "dangerous_content": (
        "violence",
        "violence_graphic",
        "self_harm",
        "self_harm_intent",
        "self_harm_instructions",
        "illicit",
        "illicit_violent",
    ),
}


def blocked_category(category_scores: Any, thresholds: Dict[str, str]) -> Optional[str]:
    """Return the first safety category whose score reaches its threshold, else None."""
    for category, attributes in MODERATION_CATEGORIES.items():
        cutoff = THRESHOLD_SCORES.get(thresholds.get(category, "block_medium_and_above"))
        if cutoff is None:
            continue
        for attribute in attributes:
            score = getattr(category_scores, attribute, None) or 0.0
            if score >= cutoff:
                return category
    return None


class AssistantClient:
    """Generates one assistant reply for a list of conversation turns."""

    def __init__(self, config: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        self.config = config or default_settings
        self._client = client
        self.system_instruction = self.config.ASSISTANT_SYSTEM_INSTRUCTION
        self.safety_thresholds = dict(self.config.ASSISTANT_SAFETY_THRESHOLDS)

    @property
    def moderation_enabled(self) -> bool:
        return any(THRESHOLD_SCORES.get(t) is not None for t in self.safety_thresholds.values())

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            try:
                self._client = AsyncOpenAI(
                    api_key=self.config.OPENAI_API_KEY,
                    timeout=self.config.ASSISTANT_TIMEOUT_SECONDS,
                )
            except OpenAIError as e:
                raise GenerationFailed(GenerationFailed.ERROR, f"Assistant client unavailable: {e}") from e
        return self._client

    async def _check_safety(self, text: str) -> None:
        if not text or not self.moderation_enabled:
            return
        response = await self._get_client().moderations.create(
            model=self.config.ASSISTANT_MODERATION_MODEL,
            input=text,
        )
        category = blocked_category(response.results[0].category_scores, self.safety_thresholds)
        if category:
            raise GenerationFailed(GenerationFailed.BLOCKED, f"Blocked by safety category {category}", category=category)

    async def _complete(self, messages: List[Dict[str, str]]) -> str:
        response = await self._get_client().chat.completions.create(
            model=self.config.ASSISTANT_MODEL,
            messages=messages,
            temperature=self.config.ASSISTANT_TEMPERATURE,
            max_tokens=self.config.ASSISTANT_MAX_TOKENS,
        )
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()

    async def _generate(self, turns: Sequence[Dict[str, str]]) -> str:
        prompt = turns[-1]["content"] if turns else ""
        await self._check_safety(prompt)

        messages = [{"role": ROLE_SYSTEM, "content": self.system_instruction}]
        messages.extend({"role": t["role"], "content": t["content"]} for t in turns)
        reply = await self._complete(messages)
        if not reply:
            raise GenerationFailed(GenerationFailed.EMPTY, "Assistant returned an empty reply")

        await self._check_safety(reply)
        return reply

    async def generate_reply(self, turns: Sequence[Dict[str, str]], conversation_id: Optional[int] = None) -> str:
        """
        Produce the assistant's next turn.

        Args:
            turns: Conversation so far, oldest first, as ``{"role", "content"}`` dicts;
                the last turn is the user's prompt.
            conversation_id: Only used to tag the interaction log.

        Raises:
            GenerationFailed: provider error, timeout, empty reply or safety block.
        """
        started = time.monotonic()
        error: Optional[str] = None
        reply: Optional[str] = None
        try:
            reply = await asyncio.wait_for(self._generate(turns), timeout=self.config.ASSISTANT_TIMEOUT_SECONDS)
            return reply
        except GenerationFailed as e:
            error = str(e)
            raise
        except asyncio.TimeoutError as e:
            error = f"timed out after {self.config.ASSISTANT_TIMEOUT_SECONDS}s"
            raise GenerationFailed(GenerationFailed.ERROR, f"Assistant {error}") from e
        except OpenAIError as e:
            error = f"{type(e).__name__}: {e}"
            raise GenerationFailed(GenerationFailed.ERROR, "Assistant provider error") from e
        finally:
            latency_ms = int((time.monotonic() - started) * 1000)
            if error:
                logger.error(f"Assistant generation failed for conversation {conversation_id}: {error}")
            get_assistant_logger().log_interaction(
                agent_name=AGENT_NAME,
                operation="generate_reply",
                request_data=list(turns),
                response_text=reply,
                error=error,
                conversation_id=conversation_id,
                model_name=self.config.ASSISTANT_MODEL,
                latency_ms=latency_ms,
                additional_metadata={
                    "temperature": self.config.ASSISTANT_TEMPERATURE,
                    "max_tokens": self.config.ASSISTANT_MAX_TOKENS,
                },
            )


class ConversationLocks:
    """One asyncio.Lock per conversation id, dropped once nobody holds a reference."""

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def get(self, conversation_id: int) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock


conversation_locks = ConversationLocks()


class ConversationService:
    def __init__(
        self,
        db: Session,
        assistant: AssistantClient,
        config: Optional[Settings] = None,
        locks: Optional[ConversationLocks] = None,
    ):
        self.db = db
        self.assistant = assistant
        self.config = config or default_settings
        self.locks = locks or conversation_locks

    def start_conversation(self, user_id: int, obj_in: ConversationCreate) -> Conversation:
        """Create a conversation seeded with the assistant's greeting."""
        conversation = crud.conversation.create_with_user(self.db, obj_in=obj_in, user_id=user_id)
        crud.conversation_message.append(
            self.db,
            conversation=conversation,
            role=ROLE_ASSISTANT,
            content=self.config.ASSISTANT_GREETING,
        )
        self.db.refresh(conversation)
        logger.info(f"Started conversation {conversation.id} for user {user_id}")
        return conversation

    def get_messages(self, conversation: Conversation) -> List[ConversationMessage]:
        return crud.conversation_message.get_conversation_messages(self.db, conversation_id=conversation.id)

    @staticmethod
    def _turns(messages: Sequence[ConversationMessage]) -> List[Dict[str, str]]:
        # Fallback turns were never produced by the model; keep them out of its context
        return [{"role": m.role, "content": m.content} for m in messages if not m.is_fallback]

    async def send_message(
        self, conversation: Conversation, content: str
    ) -> Tuple[ConversationMessage, ConversationMessage]:
        """Append the user's turn and the assistant's reply (or the fallback message)."""
        async with self.locks.get(conversation.id):
            # Session work runs off the event loop; the lock keeps it sequential
            user_message = await asyncio.to_thread(
                crud.conversation_message.append,
                self.db,
                conversation=conversation,
                role=ROLE_USER,
                content=content,
            )
            history = await asyncio.to_thread(self.get_messages, conversation)
            turns = self._turns(history)

            started = time.monotonic()
            is_fallback = False
            try:
                reply = await self.assistant.generate_reply(turns, conversation_id=conversation.id)
            except GenerationFailed as e:
                logger.warning(f"Using fallback reply for conversation {conversation.id}: {e.reason}")
                reply = self.config.ASSISTANT_FALLBACK_MESSAGE
                is_fallback = True
            response_time_ms = int((time.monotonic() - started) * 1000)

            assistant_message = await asyncio.to_thread(
                crud.conversation_message.append,
                self.db,
                conversation=conversation,
                role=ROLE_ASSISTANT,
                content=reply,
                is_fallback=is_fallback,
                response_time_ms=response_time_ms,
            )

        assistant_replies_total.labels(outcome="fallback" if is_fallback else "generated").inc()
        return user_message, assistant_message
