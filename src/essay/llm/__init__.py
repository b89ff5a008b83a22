"""Essay provider registry.

Provider modules are resolved on first use, so an SDK only has to be
installed for the provider actually selected::

    provider = get_provider("gemini")
    text = provider.complete(prompt, model=provider.fallback_models[0])
"""

import pkgutil

from src.essay.llm.base import ESSAY_SYSTEM_PROMPT, LLMProvider

__all__ = ["ESSAY_SYSTEM_PROMPT", "LLMProvider", "available_providers", "get_provider"]

PROVIDERS: dict[str, str] = {
    "anthropic": "src.essay.llm.anthropic:AnthropicProvider",
    "gemini": "src.essay.llm.gemini:GeminiProvider",
    "ollama": "src.essay.llm.ollama:OllamaProvider",
    "openai": "src.essay.llm.openai:OpenAIProvider",
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate a provider by name. Raises ValueError for unknown names."""
    try:
        target = PROVIDERS[name]
    except KeyError:
        msg = f"Unknown LLM provider '{name}'. Available: {', '.join(available_providers())}"
        raise ValueError(msg) from None
    provider_cls: type[LLMProvider] = pkgutil.resolve_name(target)
    return provider_cls()


def available_providers() -> list[str]:
    return sorted(PROVIDERS)
