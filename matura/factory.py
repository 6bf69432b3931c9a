"""
Factory for creating provider instances and pipelines.
"""

from matura.pipeline import GenerationPipeline
from matura.services.ai_service import UnconfiguredService
from matura.services.figma_service import FigmaService
from matura.services.gemini_service import GeminiService
from matura.services.openai_service import OpenAIService
from matura.utils.config import config
from matura.utils.constants import GEMINI_PROVIDER, OPENAI_PROVIDER
from matura.utils.logger import logger


def _gemini():
    if not config.google_ai_api_key:
        logger.warning("GOOGLE_AI_API_KEY is not set, Gemini calls will fall back")
        return UnconfiguredService(GEMINI_PROVIDER)
    return GeminiService(config.google_ai_api_key, config.google_ai_model)


def _openai():
    if not config.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set, OpenAI calls will fall back")
        return UnconfiguredService(OPENAI_PROVIDER)
    return OpenAIService(config.openai_api_key, config.openai_model, config.openai_text_model)


def create_provider(provider_type: str):
    """
    Create a provider adapter by name.

    Args:
        provider_type: "gemini" or "openai"

    Returns:
        The provider, or an UnconfiguredService when its API key is missing
    """
    if provider_type == GEMINI_PROVIDER:
        return _gemini()
    elif provider_type == OPENAI_PROVIDER:
        return _openai()
    else:
        raise ValueError(f"Unsupported provider type: {provider_type}")


def create_pipeline(free_text_provider: str = GEMINI_PROVIDER, structured_provider: str = OPENAI_PROVIDER):
    """
    Factory to create the generation pipeline from the global config.

    Args:
        free_text_provider: Provider used for idea and design stages
        structured_provider: Provider used for function calling; must support it

    Returns:
        GenerationPipeline instance
    """
    if structured_provider != OPENAI_PROVIDER:
        raise ValueError(f"Unsupported structured provider: {structured_provider}")

    free_text = create_provider(free_text_provider)
    structured = create_provider(structured_provider)

    return GenerationPipeline(
        free_text=free_text,
        structured=structured,
        code_text_generator=structured,
        design_tokens=FigmaService(),
        figma_api_key=config.figma_api_key,
        figma_file_id=config.figma_file_id,
        defaults=config.generation_defaults,
    )
