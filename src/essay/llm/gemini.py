"""Google Gemini essay provider (google-genai SDK)."""

from types import ModuleType

from src.essay.llm.base import LLMProvider

# Fastest first; the preview model is the last resort.
GEMINI_FALLBACK_MODELS = (
    "gemini-flash-latest",
    "gemini-flash-lite-latest",
    "gemini-3-pro-preview",
)


class GeminiProvider(LLMProvider):
    provider_id = "gemini"
    models = GEMINI_FALLBACK_MODELS
    env_var = "GOOGLE_API_KEY"
    sdk_module = "google.genai"
    sdk_requirement = "google-genai"
    sdk_extra = "gemini"

    def _request(
        self,
        sdk: ModuleType,
        api_key: str | None,
        prompt: str,
        model: str,
        system: str,
    ) -> str:
        response = sdk.Client(api_key=api_key).models.generate_content(
            model=model,
            contents=prompt,
            config=sdk.types.GenerateContentConfig(system_instruction=system),
        )
        return response.text or ""
