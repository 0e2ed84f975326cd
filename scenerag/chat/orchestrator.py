import json
from typing import Any, Dict, List, Optional
from loguru import logger

from scenerag.config.settings import ChatConfig
from scenerag.exceptions import GenerationError, ProviderException, SceneRAGException, ValidationException
from scenerag.models import Conversation, Message, MessageContext, utc_now
from scenerag.providers.base import LLMProvider
from scenerag.retrieval.search_service import SearchService
from .conversation_store import ConversationStore
from .prompts import build_messages
from .state import TurnStateMachine
from .tools import ToolExecutor


class ConversationOrchestrator:
    """
    Runs chat turns: retrieve context, call the model, execute requested
    functions until it answers, then persist the user/assistant pair.

    A turn fails with MaxIterationsExceeded once ``max_iterations`` model calls
    have all asked for functions, and with UnknownFunctionError when the model
    names an undeclared function. When the model backend fails or answers with
    nothing usable, the assistant message carries the configured fallback text
    and ``degraded=True``.
    """

    def __init__(
        self,
        conversations: ConversationStore,
        search_service: SearchService,
        llm: Optional[LLMProvider],
        tools: ToolExecutor,
        config: Optional[ChatConfig] = None,
    ):
        self.conversations = conversations
        self.search_service = search_service
        self.llm = llm
        self.tools = tools
        self.config = config or ChatConfig()

    async def create_conversation(self, campaign_id: Optional[str] = None) -> Conversation:
        return await self.conversations.create(campaign_id)

    async def get_conversation(self, conversation_id: str) -> Conversation:
        return await self.conversations.get(conversation_id)

    async def list_conversations(self, campaign_id: Optional[str] = None, limit: int = 20) -> List[Conversation]:
        return await self.conversations.list(campaign_id, limit)

    async def delete_conversation(self, conversation_id: str) -> None:
        await self.conversations.delete(conversation_id)

    async def send_message(self, conversation_id: str, text: str) -> Message:
        """Run one turn and return the assistant's reply."""
        if not text or not text.strip():
            raise ValidationException("Message must not be empty")

        conversation = await self.conversations.get(conversation_id)
        expected_version = conversation.version
        machine = TurnStateMachine(self.config.max_iterations)
        user_message = Message(role="user", content=text)

        try:
            machine.start_retrieval()
            context = await self.search_service.query_scenes(
                text, campaign_id=conversation.campaign_id, limit=self.config.context_size
            )
            messages = build_messages(conversation.messages, context, text, self.config.history_window)
            try:
                content = await self._generate(machine, messages, conversation.campaign_id)
                degraded = False
            except GenerationError as e:
                logger.error(f"Generation failed for conversation {conversation_id}: {e}")
                content = self.config.fallback_message
                degraded = True
                machine.respond()
        except SceneRAGException:
            machine.fail()
            raise

        assistant_message = Message(
            role="assistant",
            content=content,
            context=MessageContext(scenes=[result.scene for result in context]),
            degraded=degraded,
        )
        conversation.messages.extend([user_message, assistant_message])
        conversation.updated_at = utc_now()
        await self.conversations.save(conversation, expected_version)

        logger.info(
            f"Conversation {conversation_id}: answered with {len(context)} context scenes "
            f"after {machine.round_trips} function round trips (degraded={degraded})"
        )
        return assistant_message

    async def _call_model(self, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        if self.llm is None:
            raise GenerationError("No language model is configured")
        try:
            return await self.llm.chat_completion(
                messages, tools=self.tools.declarations, temperature=self.config.temperature
            )
        except GenerationError:
            raise
        except ProviderException as e:
            raise GenerationError(f"Language model unavailable: {e.message}") from e

    async def _generate(
        self, machine: TurnStateMachine, messages: List[Dict[str, Any]], campaign_scope: Optional[str]
    ) -> str:
        while True:
            machine.begin_generation()
            response = await self._call_model(messages)
            tool_calls = response.get("tool_calls") or []

            if not tool_calls:
                content = response.get("content")
                if not content or not content.strip():
                    raise GenerationError("Model returned neither text nor a function call")
                machine.respond()
                return content

            machine.request_functions()
            for call in tool_calls:
                self.tools.check(call["name"])

            messages.append({
                "role": "assistant",
                "content": response.get("content"),
                "tool_calls": [
                    {
                        "id": call["id"],
                        "type": "function",
                        "function": {"name": call["name"], "arguments": json.dumps(call["arguments"])},
                    }
                    for call in tool_calls
                ],
            })

            machine.start_execution()
            for call in tool_calls:
                result = await self.tools.execute(call["name"], call["arguments"], campaign_scope)
                messages.append({
                    "role": "tool",
                    "tool_call_id": call["id"],
                    "content": json.dumps(result, default=str),
                })
            machine.finish_execution()
            logger.debug(f"Function round trip {machine.round_trips} done: {[c['name'] for c in tool_calls]}")
