"""
Exception types for the generation pipeline.

None of these escape a stage: provider adapters and stages catch them and
substitute fallback data.
"""


class MaturaError(Exception):
    """Base class for pipeline errors."""


class ProviderCallError(MaturaError):
    """A language-model provider call failed (network, auth, quota)."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ExtractionError(MaturaError):
    """No usable JSON object could be recovered from model output."""


class DesignTokenUnavailable(MaturaError):
    """The design token provider is unreachable or misconfigured."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code
