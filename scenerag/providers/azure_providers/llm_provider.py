from scenerag.providers.base import LLMProvider
from loguru import logger
from scenerag.utils.error_handler import ProviderException, ConfigurationException
from typing import Dict, Any, List, Optional
from scenerag.utils.error_handler import handle_exceptions, convert_exceptions
from scenerag.exceptions import GenerationError
from scenerag.providers.openai_providers.llm_provider import completion_to_dict
from .client import build_azure_openai_client


def _is_transient(e: Exception) -> bool:
    return not isinstance(e, (GenerationError, ConfigurationException))


class AzureLLMProvider(LLMProvider):
    """Azure OpenAI LLM provider implementation."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = build_azure_openai_client(config)

    @handle_exceptions(retries=2, exceptions=(ProviderException,), should_retry=_is_transient)
    @convert_exceptions({Exception: ProviderException})
    async def chat_completion(
        self, messages: List[Dict], tools: Optional[List[Dict]] = None, **kwargs
    ) -> Dict[str, Any]:
        """Generate chat completion using Azure OpenAI."""
        deployment_name = self.config.get("deployment_name")
        if not deployment_name:
            raise ConfigurationException("Azure OpenAI deployment name is required")

        completion_kwargs = {
            "model": deployment_name,
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
            f"Azure completion finished: reason={result['finish_reason']}, "
            f"tool_calls={[c['name'] for c in result['tool_calls']]}"
        )
        return result

    async def close(self):
        """Close the LLM client and cleanup resources."""
        if self.client:
            logger.info("Closing Azure OpenAI LLM client")
            await self.client.close()
