"""
OpenAI service implementation for Matura.
Handles function-calling (structured) and plain text generation with OpenAI models.
"""

import json
from typing import Any, Dict

from openai import AsyncOpenAI

from matura.errors import ProviderCallError
from matura.models.blueprint import FunctionSchema, ProviderResult
from matura.services.ai_service import FreeTextGenerator, StructuredGenerator
from matura.utils.constants import OPENAI_PROVIDER
from matura.utils.logger import logger


class OpenAIService(StructuredGenerator, FreeTextGenerator):
    """OpenAI service implementation."""

    name = OPENAI_PROVIDER

    def __init__(self, api_key: str, model: str, text_model: str = None):
        """
        Initialize the OpenAI service.

        Args:
            api_key: OpenAI API key
            model: OpenAI model used for function calling
            text_model: OpenAI model used for plain text generation (defaults to ``model``)
        """
        self.api_key = api_key
        self.model = model
        self.text_model = text_model or model
        self.client = AsyncOpenAI(api_key=api_key)

    async def invoke(
        self,
        function_schema: FunctionSchema,
        prompt: str,
        system_instruction: str,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ) -> ProviderResult:
        """
        Force a single tool call and return its parsed arguments.

        Args:
            function_schema: The function contract the output must follow
            prompt: User prompt
            system_instruction: System message
            temperature: Sampling temperature
            max_tokens: Maximum output tokens

        Returns:
            ProviderResult with the decoded arguments dict
        """
        logger.info(f"Invoking OpenAI function {function_schema.name} ({self.model})")
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": prompt},
                ],
                tools=[
                    {
                        "type": "function",
                        "function": {
                            "name": function_schema.name,
                            "description": function_schema.description,
                            "parameters": function_schema.parameters,
                        },
                    }
                ],
                tool_choice={"type": "function", "function": {"name": function_schema.name}},
            )
            return ProviderResult(success=True, data=self._parse_tool_arguments(response))
        except Exception as e:
            logger.error(f"Error invoking OpenAI function {function_schema.name}: {e}")
            return ProviderResult(success=False, error=str(e))

    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 2048) -> ProviderResult:
        """
        Plain chat completion, used when function calling is not available.

        Args:
            prompt: The full prompt
            temperature: Sampling temperature
            max_tokens: Maximum output tokens

        Returns:
            ProviderResult holding the response text
        """
        logger.info(f"Generating text with OpenAI ({self.text_model})")
        try:
            response = await self.client.chat.completions.create(
                model=self.text_model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
            if not response.choices or not response.choices[0].message.content:
                raise ProviderCallError(self.name, "empty completion")
            return ProviderResult(success=True, data=response.choices[0].message.content)
        except Exception as e:
            logger.error(f"Error generating text with OpenAI: {e}")
            return ProviderResult(success=False, error=str(e))

    def _parse_tool_arguments(self, response) -> Dict[str, Any]:
        if not response.choices:
            raise ProviderCallError(self.name, "no choices returned")

        tool_calls = response.choices[0].message.tool_calls
        if not tool_calls:
            raise ProviderCallError(self.name, "model did not call the function")

        arguments = json.loads(tool_calls[0].function.arguments)
        if not isinstance(arguments, dict):
            raise ProviderCallError(self.name, "function arguments are not an object")
        return arguments
