"""
Design inspiration stage.
"""

from pydantic import ValidationError

from matura.extraction.extractor import ResponseExtractor
from matura.extraction.targets import DESIGN_TARGET
from matura.models.blueprint import DesignProfile, GenerationConfig, Typography
from matura.services.ai_service import FreeTextGenerator
from matura.stages.base import FREE_TEXT_ROLE, StageOutput, guarded_call
from matura.utils.constants import DEFAULT_COLOR_PALETTE, DESIGN_MAX_TOKENS, DESIGN_TEMPERATURE
from matura.utils.logger import logger
from matura.utils.templates import load_prompt

DEFAULT_DESIGN_PROFILE = DesignProfile(
    colorPalette=list(DEFAULT_COLOR_PALETTE),
    typography=Typography(heading="Inter", body="Inter"),
    components=["Card", "Button", "Input"],
    layout="card",
    mood="modern",
    designStyle="modern",
    inspirationNote="Clean and intuitive design",
    source="default",
)


class DesignInspirationStage:
    """Palette, typography, components and mood for the idea."""

    name = "design"

    def __init__(self, generator: FreeTextGenerator, extractor: ResponseExtractor = None):
        self.generator = generator
        self.extractor = extractor or ResponseExtractor(DESIGN_TARGET)

    async def run(self, user_idea: str, config: GenerationConfig) -> StageOutput:
        logger.info("Generating design inspiration")
        prompt = load_prompt("design_inspiration").substitute(idea=user_idea)
        result = await guarded_call(
            self.generator.generate(prompt, temperature=DESIGN_TEMPERATURE, max_tokens=DESIGN_MAX_TOKENS),
            self.generator.name,
        )

        if result.success and result.data:
            extraction = self.extractor.extract(result.data, context=user_idea)
            if extraction.ok:
                try:
                    profile = DesignProfile(source="default", **extraction.record)
                    return StageOutput(self.name, profile, self.generator.name, FREE_TEXT_ROLE)
                except ValidationError as e:
                    logger.warning(f"Extracted design failed validation: {e}")
            else:
                logger.warning(f"Could not extract design JSON: {extraction.error}")
        else:
            logger.warning(f"Design provider failed: {result.error}")

        logger.info("Using default design profile")
        return StageOutput(self.name, DEFAULT_DESIGN_PROFILE)
