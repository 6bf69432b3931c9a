"""
Abstract base classes for the provider roles used in Matura.
Stages depend on these interfaces, never on a concrete SDK.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from matura.models.blueprint import FunctionSchema, ProviderResult


class FreeTextGenerator(ABC):
    """Provider role that returns prose, possibly with embedded JSON."""

    name: str = "free-text"

    @abstractmethod
    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 2048) -> ProviderResult:
        """
        Generate free text for the given prompt.

        Args:
            prompt: The full prompt
            temperature: Sampling temperature
            max_tokens: Upper bound on generated tokens

        Returns:
            ProviderResult with the text in ``data`` on success. Failures are
            reported with ``success=False``, never raised.
        """
        pass


class StructuredGenerator(ABC):
    """Provider role that returns data shaped to a named function schema."""

    name: str = "structured"

    @abstractmethod
    async def invoke(
        self,
        function_schema: FunctionSchema,
        prompt: str,
        system_instruction: str,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> ProviderResult:
        """
        Call the model and return arguments matching ``function_schema``.

        Args:
            function_schema: Name, description and JSON-schema parameters
            prompt: The user prompt
            system_instruction: The system message
            temperature: Sampling temperature
            max_tokens: Upper bound on generated tokens

        Returns:
            ProviderResult with a dict in ``data`` on success.
        """
        pass


class DesignTokenProvider(ABC):
    """Source of design-file documents."""

    name: str = "design-tokens"

    @abstractmethod
    async def fetch(self, file_id: str, api_key: str) -> Dict[str, Any]:
        """
        Fetch a design-file document.

        Raises:
            DesignTokenUnavailable: on a non-2xx status or transport error
        """
        pass


class UnconfiguredService(FreeTextGenerator, StructuredGenerator):
    """Stand-in for a provider whose credentials are missing. Every call fails."""

    def __init__(self, name: str, reason: str = "API key not configured"):
        self.name = name
        self.reason = reason

    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 2048) -> ProviderResult:
        return ProviderResult(success=False, error=f"{self.name}: {self.reason}")

    async def invoke(
        self,
        function_schema: FunctionSchema,
        prompt: str,
        system_instruction: str,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> ProviderResult:
        return ProviderResult(success=False, error=f"{self.name}: {self.reason}")
