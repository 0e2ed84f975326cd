from typing import Any, Dict
from openai import AsyncAzureOpenAI
from scenerag.providers.credentials import AzureCredentials
from scenerag.utils.error_handler import ProviderException, ConfigurationException


def build_azure_openai_client(config: Dict[str, Any], default_max_retries: int = 2) -> AsyncAzureOpenAI:
    """Create an AsyncAzureOpenAI client from an LLM or embedding config dict."""
    endpoint = config.get("endpoint")
    if not endpoint:
        raise ConfigurationException("Azure OpenAI endpoint is required")

    common = {
        "api_version": config.get("api_version", "2024-08-01-preview"),
        "azure_endpoint": endpoint,
        "max_retries": config.get("max_retries", default_max_retries),
        "timeout": config.get("timeout", 200),
    }
    try:
        if config.get("use_managed_identity", False):
            token_provider = AzureCredentials.openai_token_provider(config.get("managed_identity_client_id"))
            return AsyncAzureOpenAI(azure_ad_token_provider=token_provider, **common)

        api_key = config.get("api_key")
        if not api_key:
            raise ConfigurationException("Azure OpenAI API key is required when managed identity is disabled")
        return AsyncAzureOpenAI(api_key=api_key, **common)
    except ConfigurationException:
        raise
    except Exception as e:
        raise ProviderException(f"Failed to initialize Azure OpenAI client: {e}")
