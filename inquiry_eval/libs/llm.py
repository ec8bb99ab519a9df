"""LLM utilities for creating and configuring AI agents."""


import logging
import os
from typing import Optional, Dict, Any

from pydantic_ai import Agent

from inquiry_eval.libs.config_loader import ConfigType, ConfigurationError, get_config


# Fix up logging level for httpx to WARNING to reduce noise
logging.getLogger("httpx").setLevel(logging.WARNING)

LOG = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "openai": "gpt-4.1-mini",
    "google": "gemini-2.5-flash",
}
DEFAULT_API_KEY_ENVS = {
    "openai": "OPENAI_API_KEY",
    "google": "GEMINI_API_KEY",
}


def resolve_api_key(configs: ConfigType) -> str:
    """
    Find the API key for the configured provider.

    ``llm.api_key`` wins; otherwise the environment variable named by
    ``llm.api_key_env`` (provider default when unset) is consulted.

    Raises:
        ConfigurationError: If no key can be found
    """
    provider = get_config("llm.provider", configs, default="openai")
    api_key = get_config("llm.api_key", configs, default=None)
    if api_key:
        return api_key

    env_name = get_config("llm.api_key_env", configs, default=None) or DEFAULT_API_KEY_ENVS.get(provider)
    api_key = os.environ.get(env_name) if env_name else None
    if not api_key:
        raise ConfigurationError(
            f"No API key configured for provider '{provider}': "
            f"set llm.api_key in config/local.yaml or the {env_name} environment variable"
        )
    return api_key


def _create_model(provider: str, model: str, api_key: str, organization: Optional[str]):
    if provider == "openai":
        from openai import AsyncOpenAI
        from pydantic_ai.models.openai import OpenAIResponsesModel
        from pydantic_ai.providers.openai import OpenAIProvider

        client = AsyncOpenAI(api_key=api_key, organization=organization)
        return OpenAIResponsesModel(model, provider=OpenAIProvider(openai_client=client))
    if provider == "google":
        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider

        return GoogleModel(model, provider=GoogleProvider(api_key=api_key))
    raise ConfigurationError(f"Unsupported LLM provider: {provider}")


def create_agent(configs: ConfigType,
                 model: Optional[str] = None,
                 settings_dict: Optional[Dict[str, Any]] = None,
                 system_prompt: Optional[str] = None,
                 output_type: Any = None) -> Agent:
    """
    Create a pydantic-ai Agent for the configured provider.

    Args:
        configs: Configuration dictionary (required)
        model: Model to use (overrides config value)
        settings_dict: Pydantic AI settings dict (overrides config values)
        system_prompt: System prompt for the agent (optional)
        output_type: Structured output type (optional, plain text when omitted)

    Returns:
        Configured Agent. Retries are disabled: one request per run.

    Raises:
        ConfigurationError: If the API key is missing or the provider is unknown
    """
    provider = get_config("llm.provider", configs, default="openai")
    api_key = resolve_api_key(configs)
    organization = get_config("llm.organization", configs, default=None)
    model = model or get_config("llm.model", configs, default=None) or DEFAULT_MODELS.get(provider)
    base_settings = get_config("llm.settings", configs, default={}) or {}

    settings_dict = base_settings | (settings_dict or {})
    llm_model = _create_model(provider, model, api_key, organization)
    LOG.debug("Creating %s agent with model %s", provider, model)

    agent_kwargs: Dict[str, Any] = {}
    if system_prompt:
        agent_kwargs['system_prompt'] = system_prompt
    if output_type is not None:
        agent_kwargs['output_type'] = output_type

    return Agent(
        model=llm_model,
        model_settings=settings_dict or None,
        retries=0,
        **agent_kwargs,
    )
