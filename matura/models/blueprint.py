"""
Shared data models for the application blueprint produced by the pipeline.
"""

import json
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from matura.utils.constants import DEFAULT_COLOR_PALETTE

Category = Literal[
    "creative", "entertainment", "education", "health",
    "finance", "ecommerce", "social", "productivity",
]
CATEGORIES = (
    "creative", "entertainment", "education", "health",
    "finance", "ecommerce", "social", "productivity",
)
BusinessPotential = Literal["low", "medium", "high"]
DesignSource = Literal["external-integrated", "default"]


class Record(BaseModel):
    """Immutable base for every record returned by a pipeline run."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class IdeaRecord(Record):
    """Model representing an enhanced product idea."""

    original: str = Field(..., description="The idea exactly as the user typed it")
    enhanced: str = Field(..., description="Sharper, more specific description of the idea")
    category: Category = Field(..., description="Primary application category")
    coreValue: str = Field(..., description="The essential value the app delivers")
    realProblem: str = Field(..., description="The underlying problem, not the surface request")
    targetUsers: List[str] = Field(..., description="Specific user groups")
    keyFeatures: List[str] = Field(..., description="Practical, implementable features")
    businessLogic: List[str] = Field(..., description="Rules and processing the features need")
    uniqueValue: str = Field(..., description="What sets the app apart")
    industryContext: str = Field(..., description="Market or domain context")
    variations: List[str] = Field(default_factory=list, description="Alternative takes on the idea")
    insights: List[str] = Field(..., description="Business and technical insights")
    businessPotential: BusinessPotential = Field(..., description="low, medium or high")


class Typography(Record):
    heading: str = "Inter"
    body: str = "Inter"
    accent: Optional[str] = None


def _four_colors(palette: List[str]) -> List[str]:
    colors = [c for c in palette if isinstance(c, str) and c.strip()][:4]
    while len(colors) < 4:
        colors.append(DEFAULT_COLOR_PALETTE[len(colors)])
    return colors


class DesignProfile(Record):
    """Visual design direction: primary, secondary, accent and background colors."""

    colorPalette: List[str] = Field(default_factory=lambda: list(DEFAULT_COLOR_PALETTE))
    typography: Typography = Field(default_factory=Typography)
    components: List[str] = Field(default_factory=list)
    layout: str = "card"
    mood: str = "modern"
    designStyle: str = "modern"
    inspirationNote: str = ""
    source: DesignSource = "default"
    designTokens: Optional[Dict[str, Any]] = None

    @field_validator("colorPalette")
    @classmethod
    def exactly_four_colors(cls, value: List[str]) -> List[str]:
        return _four_colors(value)


class DesignSystemRecord(Record):
    """Design system tokens, either pulled from a design file or the built-in default."""

    source: DesignSource = "default"
    document: Optional[Dict[str, Any]] = None
    colorPalette: List[str] = Field(default_factory=list)
    typography: Typography = Field(default_factory=Typography)
    components: List[str] = Field(default_factory=list)
    spacing: List[str] = Field(default_factory=list)
    borderRadius: List[str] = Field(default_factory=list)
    shadows: List[str] = Field(default_factory=list)


class SchemaField(Record):
    name: str
    type: str = "string"
    required: bool = False
    label: str = ""
    validation: Optional[str] = None
    defaultValue: Optional[str] = None

    @field_validator("validation", "defaultValue", mode="before")
    @classmethod
    def scalar_as_text(cls, value: Any) -> Any:
        # Models send defaults like false or 0 as JSON scalars
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)


class SchemaBlueprint(Record):
    """Database table blueprint backing the generated UI."""

    tableName: str
    fields: List[SchemaField] = Field(..., min_length=1)
    relationships: List[str] = Field(default_factory=list)
    businessLogic: List[str] = Field(default_factory=list)
    indexes: List[str] = Field(default_factory=list)


class CodeArtifact(Record):
    componentName: str
    componentCode: str = Field(..., min_length=1)
    typeDefinitions: str = ""
    customHooks: Optional[str] = None
    apiIntegration: Optional[str] = None
    storybook: Optional[str] = None


class QualityScores(Record):
    creativity: float
    technical: float
    design: float
    overall: float


class TokenUsage(Record):
    freeText: int = 0
    structured: int = 0
    total: int = 0


class PipelineMetadata(Record):
    providersUsed: List[str] = Field(default_factory=list)
    processingTimeMs: int = 0
    qualityScores: QualityScores
    tokenUsage: TokenUsage


class PipelineResult(Record):
    """Final blueprint returned by generate_app."""

    idea: IdeaRecord
    design: DesignProfile
    schema_: SchemaBlueprint = Field(..., alias="schema")
    code: CodeArtifact
    metadata: PipelineMetadata


class GenerationConfig(Record):
    """
    Options accepted by generate_app.

    mode and qualityPriority are part of the public surface but no stage
    branches on them.
    """

    mode: Literal["creative", "professional", "experimental", "balanced"] = "balanced"
    useDesignSystem: bool = True
    creativityLevel: Literal["low", "medium", "high"] = "medium"
    qualityPriority: Literal["speed", "quality", "creativity"] = "quality"


class ProviderResult(BaseModel):
    """Outcome of a single provider call."""

    success: bool
    data: Any = None
    error: Optional[str] = None


class FunctionSchema(BaseModel):
    """Named function contract handed to a StructuredGenerator."""

    name: str
    description: str
    parameters: Dict[str, Any]
