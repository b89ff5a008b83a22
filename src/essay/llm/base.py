"""Essay provider base: shared request flow, per-vendor hooks."""

import importlib
import logging
import os
from abc import ABC, abstractmethod
from types import ModuleType
from typing import ClassVar

logger = logging.getLogger(__name__)

ESSAY_SYSTEM_PROMPT = "You are an expert scholarship essay writer and college counselor."
ESSAY_MAX_TOKENS = 2048


class LLMProvider(ABC):
    """Base class for essay providers.

    Subclasses declare who they are as class attributes and implement
    ``_request``. API-key lookup, lazy SDK import, model choice and the
    default system prompt are handled here.

    ``models`` is the fallback ladder ``generate_essay`` walks when no
    models are configured; its first entry is the default.
    """

    provider_id: ClassVar[str]
    models: ClassVar[tuple[str, ...]]
    env_var: ClassVar[str | None] = None
    sdk_module: ClassVar[str]
    sdk_requirement: ClassVar[str]
    sdk_extra: ClassVar[str]

    @property
    def default_model(self) -> str:
        return self.models[0]

    @property
    def fallback_models(self) -> list[str]:
        return list(self.models)

    def api_key(self) -> str | None:
        """Read the API key from ``env_var``. Raises ValueError when it is unset."""
        if self.env_var is None:
            return None
        key = os.environ.get(self.env_var)
        if not key:
            msg = f"{self.env_var} environment variable is required"
            raise ValueError(msg)
        return key

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        """Send a prompt and return the raw response text.

        Args:
            prompt: Full user prompt.
            model: Override the default model. None uses ``default_model``.
            system: Override the system prompt. None uses ESSAY_SYSTEM_PROMPT.
        """
        api_key = self.api_key()
        sdk = self._import_sdk()
        use_model = model or self.default_model
        use_system = system if system is not None else ESSAY_SYSTEM_PROMPT

        logger.info("Requesting essay from %s (%s)...", self.provider_id, use_model)
        return self._request(sdk, api_key, prompt, use_model, use_system)

    def _import_sdk(self) -> ModuleType:
        try:
            return importlib.import_module(self.sdk_module)
        except ImportError:
            msg = (
                f"{self.sdk_requirement} is required for {self.provider_id} essays. "
                f"Install with: pip install 'scholarship-aggregator[{self.sdk_extra}]'"
            )
            raise ImportError(msg) from None

    @abstractmethod
    def _request(
        self,
        sdk: ModuleType,
        api_key: str | None,
        prompt: str,
        model: str,
        system: str,
    ) -> str:
        """Issue one completion call with an already-imported SDK module."""
