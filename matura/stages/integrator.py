"""
Result integration: merges stage outputs into a PipelineResult with metadata.
"""

import time
from typing import Callable, Dict, List, Optional

from matura.models.blueprint import (
    DesignProfile,
    DesignSystemRecord,
    PipelineMetadata,
    PipelineResult,
    QualityScores,
    TokenUsage,
)
from matura.stages.base import DESIGN_TOKEN_ROLE, FREE_TEXT_ROLE, STRUCTURED_ROLE, StageOutput
from matura.utils.constants import STAGE_TOKEN_ESTIMATES
from matura.utils.logger import logger

QualityScorer = Callable[[Dict[str, StageOutput]], QualityScores]


def heuristic_quality_scores(outputs: Dict[str, StageOutput]) -> QualityScores:
    """Placeholder scores keyed on which stages got provider output."""

    def used(stage: str, role: Optional[str] = None) -> bool:
        output = outputs.get(stage)
        return output is not None and output.from_provider and (role is None or output.role == role)

    creativity = 0.9 if used("idea") else 0.6
    technical = 0.95 if used("schema", STRUCTURED_ROLE) or used("code", STRUCTURED_ROLE) else 0.7
    if used("design_system", DESIGN_TOKEN_ROLE):
        design = 0.98
    elif used("design"):
        design = 0.85
    else:
        design = 0.7

    return QualityScores(
        creativity=creativity,
        technical=technical,
        design=design,
        overall=round((creativity + technical + design) / 3, 2),
    )


def merge_design(profile: DesignProfile, design_system: Optional[DesignSystemRecord]) -> DesignProfile:
    """Let an integrated design system override the inspiration profile."""
    if design_system is None or design_system.source != "external-integrated":
        return profile

    data = profile.model_dump()
    data.update(
        colorPalette=list(design_system.colorPalette),
        typography=design_system.typography.model_dump(),
        components=list(design_system.components),
        source="external-integrated",
        designTokens=design_system.document,
    )
    # Re-validate so the palette is cut back to four colors
    return DesignProfile(**data)


def estimate_token_usage(outputs: Dict[str, StageOutput]) -> TokenUsage:
    free_text = 0
    structured = 0
    for stage, output in outputs.items():
        if not output.from_provider:
            continue
        estimate = STAGE_TOKEN_ESTIMATES.get(stage, 0)
        if output.role == FREE_TEXT_ROLE:
            free_text += estimate
        elif output.role == STRUCTURED_ROLE:
            structured += estimate
    return TokenUsage(freeText=free_text, structured=structured, total=free_text + structured)


class ResultIntegrator:
    """Builds the final PipelineResult. Does no I/O."""

    def __init__(self, scorer: QualityScorer = heuristic_quality_scores):
        self.scorer = scorer

    def integrate(
        self,
        idea: StageOutput,
        design: StageOutput,
        design_system: Optional[StageOutput],
        schema: StageOutput,
        code: StageOutput,
        started_at: float,
    ) -> PipelineResult:
        """
        Merge stage outputs.

        Args:
            idea, design, schema, code: Outputs of the corresponding stages
            design_system: Output of the design system stage, None when skipped
            started_at: ``time.monotonic()`` reading taken when the run began

        Returns:
            PipelineResult
        """
        outputs = {o.stage: o for o in (idea, design, design_system, schema, code) if o is not None}
        providers: List[str] = []
        for output in outputs.values():
            if output.from_provider and output.provider not in providers:
                providers.append(output.provider)

        elapsed_ms = int((time.monotonic() - started_at) * 1000)
        metadata = PipelineMetadata(
            providersUsed=providers,
            processingTimeMs=elapsed_ms,
            qualityScores=self.scorer(outputs),
            tokenUsage=estimate_token_usage(outputs),
        )
        logger.info(f"Integrated result in {elapsed_ms}ms, providers={providers}")

        return PipelineResult(
            idea=idea.value,
            design=merge_design(design.value, design_system.value if design_system else None),
            schema=schema.value,
            code=code.value,
            metadata=metadata,
        )
