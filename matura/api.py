"""
Public entry point.
"""

from typing import Any, Dict, Optional, Union

from matura.models.blueprint import GenerationConfig, PipelineResult
from matura.pipeline import GenerationPipeline


async def generate_app(
    user_idea: str,
    config: Union[GenerationConfig, Dict[str, Any], None] = None,
    pipeline: Optional[GenerationPipeline] = None,
) -> PipelineResult:
    """
    Generate an application blueprint from a one-line idea.

    Args:
        user_idea: Free-form idea, typically Japanese
        config: GenerationConfig or a dict of its fields
        pipeline: Pipeline to run; built from the environment when omitted

    Returns:
        PipelineResult, populated even if every provider fails
    """
    if pipeline is None:
        # Deferred so importing the API does not read the environment
        from matura.factory import create_pipeline
        pipeline = create_pipeline()
    return await pipeline.generate_app(user_idea, config)
