"""Anthropic Claude essay provider."""

from types import ModuleType

from src.essay.llm.base import ESSAY_MAX_TOKENS, LLMProvider


class AnthropicProvider(LLMProvider):
    provider_id = "anthropic"
    models = ("claude-sonnet-4-20250514", "claude-3-5-haiku-latest")
    env_var = "ANTHROPIC_API_KEY"
    sdk_module = "anthropic"
    sdk_requirement = "anthropic"
    sdk_extra = "anthropic"

    def _request(
        self,
        sdk: ModuleType,
        api_key: str | None,
        prompt: str,
        model: str,
        system: str,
    ) -> str:
        message = sdk.Anthropic(api_key=api_key).messages.create(
            model=model,
            max_tokens=ESSAY_MAX_TOKENS,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        # Only text blocks carry .text.
        return "".join(getattr(block, "text", "") for block in message.content)
