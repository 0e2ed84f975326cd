import json
from scenerag.providers.base import LLMProvider
from loguru import logger
from scenerag.exceptions import GenerationError
from scenerag.utils.error_handler import ProviderException, ConfigurationException
from typing import Dict, Any, List, Optional
from scenerag.utils.error_handler import handle_exceptions, convert_exceptions
from openai import AsyncOpenAI


def normalize_tool_calls(raw_tool_calls) -> List[Dict[str, Any]]:
    """Turn SDK tool call objects into plain dicts with parsed arguments."""
    calls = []
    for call in raw_tool_calls or []:
        raw_args = call.function.arguments or "{}"
        try:
            arguments = json.loads(raw_args)
        except json.JSONDecodeError as e:
            raise GenerationError(
                f"Model returned unparsable arguments for {call.function.name}: {e}",
                details={"arguments": raw_args[:200]},
            )
        if not isinstance(arguments, dict):
            raise GenerationError(f"Arguments for {call.function.name} must be a JSON object")
        calls.append({"id": call.id, "name": call.function.name, "arguments": arguments})
    return calls


def completion_to_dict(response) -> Dict[str, Any]:
    choice = response.choices[0]
    return {
        "content": choice.message.content,
        "tool_calls": normalize_tool_calls(choice.message.tool_calls),
        "usage": response.usage.model_dump() if response.usage else None,
        "model": response.model,
        "finish_reason": choice.finish_reason,
    }


def _is_transient(e: Exception) -> bool:
    return not isinstance(e, (GenerationError, ConfigurationException))


class OpenAILLMProvider(LLMProvider):
    """OpenAI LLM provider implementation."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = self._initialize_client()

    def _initialize_client(self):
        """Initialize OpenAI client."""
        api_key = self.config.get("api_key")
        if not api_key:
            raise ConfigurationException("OpenAI API key is required")
        try:
            return AsyncOpenAI(
                api_key=api_key,
                base_url=self.config.get("endpoint") or None,
                timeout=self.config.get("timeout", 200),
                max_retries=self.config.get("max_retries", 2),
            )
        except Exception as e:
            raise ProviderException(f"Failed to initialize OpenAI client: {e}")

    @handle_exceptions(retries=2, exceptions=(ProviderException,), should_retry=_is_transient)
    @convert_exceptions({Exception: ProviderException})
    async def chat_completion(
        self, messages: List[Dict], tools: Optional[List[Dict]] = None, **kwargs
    ) -> Dict[str, Any]:
        """Generate chat completion using OpenAI."""
        completion_kwargs = {
            "model": self.config.get("model_name", "gpt-4o"),
            "messages": messages,
            "temperature": kwargs.pop("temperature", self.config.get("temperature", 0.7)),
            "max_tokens": kwargs.pop("max_tokens", self.config.get("max_tokens", 2048)),
            **kwargs,
        }
        if tools:
            completion_kwargs["tools"] = tools
            completion_kwargs.setdefault("tool_choice", "auto")

        response = await self.client.chat.completions.create(**completion_kwargs)
        result = completion_to_dict(response)
        logger.debug(
            f"OpenAI completion finished: reason={result['finish_reason']}, "
            f"tool_calls={[c['name'] for c in result['tool_calls']]}"
        )
        return result

    async def close(self):
        """Close the LLM client and cleanup resources."""
        if self.client:
            logger.info("Closing OpenAI LLM client")
            await self.client.close()
