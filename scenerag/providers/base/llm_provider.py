from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def chat_completion(
        self, messages: List[Dict], tools: Optional[List[Dict]] = None, **kwargs
    ) -> Dict[str, Any]:
        """Generate chat completion response.

        Messages and tools use the OpenAI chat format. The returned dict has:
            - content: final text, or None when the model requested tools
            - tool_calls: list of {"id", "name", "arguments"} (arguments is a dict)
            - finish_reason, usage, model
        """
        pass

    async def close(self):
        """Close the underlying client. Optional to implement."""
        pass
