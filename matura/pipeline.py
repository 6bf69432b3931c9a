"""
Hybrid generation pipeline for Matura.

Runs the stages in four phases:
  1. idea enhancement and design inspiration, concurrently
  2. design system integration, when enabled
  3. schema and code generation, concurrently; code awaits the schema
  4. result integration
"""

import asyncio
import time
from typing import Any, Dict, Optional, Union

from matura.models.blueprint import GenerationConfig, PipelineResult
from matura.services.ai_service import DesignTokenProvider, FreeTextGenerator, StructuredGenerator
from matura.stages.code import CodeGenerationStage
from matura.stages.design import DesignInspirationStage
from matura.stages.design_system import DesignSystemStage
from matura.stages.idea import IdeaEnhancementStage
from matura.stages.integrator import ResultIntegrator
from matura.stages.schema import SchemaGenerationStage
from matura.utils.logger import logger

ConfigInput = Union[GenerationConfig, Dict[str, Any], None]


class GenerationPipeline:
    """Turns a one-line idea into an application blueprint."""

    def __init__(
        self,
        free_text: FreeTextGenerator,
        structured: StructuredGenerator,
        code_text_generator: Optional[FreeTextGenerator] = None,
        design_tokens: Optional[DesignTokenProvider] = None,
        figma_api_key: Optional[str] = None,
        figma_file_id: Optional[str] = None,
        defaults: Optional[Dict[str, Any]] = None,
        integrator: Optional[ResultIntegrator] = None,
    ):
        """
        Initialize the generation pipeline.

        Args:
            free_text: Provider for idea enhancement and design inspiration
            structured: Provider for schema and code function calls
            code_text_generator: Provider for the plain-text code fallback
            design_tokens: Design file provider, optional
            figma_api_key: Credential handed to ``design_tokens``
            figma_file_id: Design file to pull tokens from
            defaults: GenerationConfig fields applied before per-call config
            integrator: Result integrator, mainly to swap the quality scorer
        """
        self.idea_stage = IdeaEnhancementStage(free_text)
        self.design_stage = DesignInspirationStage(free_text)
        self.design_system_stage = DesignSystemStage(design_tokens, figma_api_key, figma_file_id)
        self.schema_stage = SchemaGenerationStage(structured)
        self.code_stage = CodeGenerationStage(structured, code_text_generator)
        self.integrator = integrator or ResultIntegrator()
        self.defaults = dict(defaults or {})

    def resolve_config(self, config: ConfigInput = None) -> GenerationConfig:
        """Per-call options layered over the pipeline defaults."""
        if isinstance(config, GenerationConfig):
            overrides = config.model_dump(exclude_unset=True)
        else:
            overrides = dict(config or {})
        return GenerationConfig(**{**self.defaults, **overrides})

    async def generate_app(self, user_idea: str, config: ConfigInput = None) -> PipelineResult:
        """
        Generate a blueprint for ``user_idea``.

        Every stage substitutes its own fallback, so this always resolves
        with a complete PipelineResult.
        """
        started_at = time.monotonic()
        user_idea = user_idea or ""
        options = self.resolve_config(config)
        logger.info(f"Starting generation (mode={options.mode}, creativity={options.creativityLevel}, "
                    f"design_system={options.useDesignSystem})")

        # Phase 1
        idea, design = await asyncio.gather(
            self.idea_stage.run(user_idea, options),
            self.design_stage.run(user_idea, options),
        )
        logger.info(f"Phase 1 done: category={idea.value.category}")

        # Phase 2
        design_system = None
        if options.useDesignSystem:
            design_system = await self.design_system_stage.run()
            logger.info(f"Phase 2 done: design system source={design_system.value.source}")
        else:
            logger.info("Phase 2 skipped: design system disabled")
        design_system_record = design_system.value if design_system else None

        # Phase 3
        schema_task = asyncio.ensure_future(
            self.schema_stage.run(idea.value, design.value, design_system_record)
        )

        async def code_after_schema():
            schema_output = await schema_task
            return await self.code_stage.run(idea.value, design.value, design_system_record, schema_output.value)

        schema, code = await asyncio.gather(schema_task, code_after_schema())
        logger.info(f"Phase 3 done: table={schema.value.tableName}, component={code.value.componentName}")

        # Phase 4
        return self.integrator.integrate(idea, design, design_system, schema, code, started_at)
