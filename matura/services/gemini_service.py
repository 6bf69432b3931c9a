"""
Gemini service implementation for Matura.
Free-text generation using Google's Gemini models.
"""

from google import genai

from matura.models.blueprint import ProviderResult
from matura.services.ai_service import FreeTextGenerator
from matura.utils.constants import GEMINI_PROVIDER
from matura.utils.logger import logger


class GeminiService(FreeTextGenerator):
    """Gemini service implementation."""

    name = GEMINI_PROVIDER

    def __init__(self, google_api_key: str, model: str):
        """
        Initialize the Gemini service.

        Args:
            google_api_key: Google AI API key
            model: Gemini model to use
        """
        self.google_api_key = google_api_key
        self.model = model
        self.gemini_client = genai.Client(api_key=google_api_key)

    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 2048) -> ProviderResult:
        """
        Generate text with Gemini.

        Args:
            prompt: The full prompt
            temperature: Sampling temperature
            max_tokens: Maximum output tokens

        Returns:
            ProviderResult holding the response text
        """
        try:
            logger.info(f"Generating text with Gemini ({self.model}, temperature={temperature})")

            config = {
                "temperature": temperature,
                "max_output_tokens": max_tokens,
            }

            response = await self.gemini_client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config
            )

            text_content = response.text
            if not text_content:
                logger.warning("Gemini returned an empty response")
                return ProviderResult(success=False, error="empty response")

            return ProviderResult(success=True, data=text_content)
        except Exception as e:
            logger.error(f"Error generating text with Gemini: {e}")
            return ProviderResult(success=False, error=str(e))
