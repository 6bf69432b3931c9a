"""
Shared pieces for pipeline stages.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Optional

from matura.models.blueprint import ProviderResult
from matura.utils.logger import logger

FREE_TEXT_ROLE = "free-text"
STRUCTURED_ROLE = "structured"
DESIGN_TOKEN_ROLE = "design-tokens"


@dataclass(frozen=True)
class StageOutput:
    """
    Value produced by a stage.

    ``provider`` and ``role`` name the provider whose output was used; both
    are None when the value came from a fallback.
    """
    stage: str
    value: Any
    provider: Optional[str] = None
    role: Optional[str] = None

    @property
    def from_provider(self) -> bool:
        return self.provider is not None


async def guarded_call(call: Awaitable[ProviderResult], provider: str) -> ProviderResult:
    """Await a provider call, turning anything it raises into a failed result."""
    try:
        return await call
    except Exception as e:
        logger.error(f"Provider {provider} raised instead of reporting failure: {e}")
        return ProviderResult(success=False, error=str(e))
