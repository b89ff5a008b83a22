"""OpenAI chat-completions essay provider."""

from types import ModuleType
from typing import Any

from src.essay.llm.base import ESSAY_MAX_TOKENS, LLMProvider


class OpenAIProvider(LLMProvider):
    provider_id = "openai"
    models = ("gpt-4o-mini", "gpt-4o")
    env_var = "OPENAI_API_KEY"
    sdk_module = "openai"
    sdk_requirement = "openai"
    sdk_extra = "openai"

    def _client(self, sdk: ModuleType, api_key: str | None) -> Any:
        return sdk.OpenAI(api_key=api_key)

    def _request(
        self,
        sdk: ModuleType,
        api_key: str | None,
        prompt: str,
        model: str,
        system: str,
    ) -> str:
        response = self._client(sdk, api_key).chat.completions.create(
            model=model,
            max_tokens=ESSAY_MAX_TOKENS,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        )
        return response.choices[0].message.content or ""
