"""Local Ollama essay provider, spoken to through its OpenAI-compatible API."""

import os
from types import ModuleType
from typing import Any

from src.essay.llm.openai import OpenAIProvider

DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaProvider(OpenAIProvider):
    """No API key; ``OLLAMA_BASE_URL`` points at a non-default server."""

    provider_id = "ollama"
    models = ("llama3", "mistral")
    env_var = None

    def _client(self, sdk: ModuleType, api_key: str | None) -> Any:
        base_url = os.environ.get("OLLAMA_BASE_URL", DEFAULT_OLLAMA_BASE_URL)
        return sdk.OpenAI(base_url=base_url, api_key="ollama")
