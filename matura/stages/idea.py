"""
Idea enhancement stage: free-text provider, extractor, then text-derived fallback.
"""

from pydantic import ValidationError

from matura.extraction.extractor import ResponseExtractor
from matura.extraction.synthesizer import FallbackSynthesizer
from matura.extraction.targets import IDEA_TARGET
from matura.models.blueprint import GenerationConfig, IdeaRecord
from matura.services.ai_service import FreeTextGenerator
from matura.stages.base import FREE_TEXT_ROLE, StageOutput, guarded_call
from matura.utils.constants import CREATIVITY_TEMPERATURES, IDEA_MAX_TOKENS
from matura.utils.logger import logger
from matura.utils.templates import load_prompt


def build_idea_prompt(user_idea: str) -> str:
    return load_prompt("idea_enhancement").substitute(idea=user_idea)


class IdeaEnhancementStage:
    """Turns the raw idea into a complete IdeaRecord."""

    name = "idea"

    def __init__(self, generator: FreeTextGenerator, extractor: ResponseExtractor = None,
                 synthesizer: FallbackSynthesizer = None):
        self.generator = generator
        self.extractor = extractor or ResponseExtractor(IDEA_TARGET)
        self.synthesizer = synthesizer or FallbackSynthesizer()

    async def run(self, user_idea: str, config: GenerationConfig) -> StageOutput:
        """
        Enhance the idea.

        Args:
            user_idea: The idea as the user typed it
            config: Generation options; creativityLevel picks the temperature

        Returns:
            StageOutput holding an IdeaRecord. Provider and extraction
            failures fall back to synthesis from ``user_idea``.
        """
        temperature = CREATIVITY_TEMPERATURES[config.creativityLevel]
        logger.info(f"Enhancing idea (creativity={config.creativityLevel}, temperature={temperature})")

        result = await guarded_call(
            self.generator.generate(build_idea_prompt(user_idea), temperature=temperature, max_tokens=IDEA_MAX_TOKENS),
            self.generator.name,
        )

        if result.success and result.data:
            extraction = self.extractor.extract(result.data, context=user_idea)
            if extraction.ok:
                try:
                    idea = IdeaRecord(original=user_idea, **extraction.record)
                    logger.info(f"Idea enhanced by {self.generator.name}: category={idea.category}")
                    return StageOutput(self.name, idea, self.generator.name, FREE_TEXT_ROLE)
                except ValidationError as e:
                    logger.warning(f"Extracted idea failed validation: {e}")
            else:
                logger.warning(f"Could not extract idea JSON: {extraction.error}")
        else:
            logger.warning(f"Idea provider failed: {result.error}")

        # Synthesize from what the user wrote, not from the unusable model output
        return StageOutput(self.name, self.synthesizer.synthesize(user_idea))
