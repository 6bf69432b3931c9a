"""Constants used throughout the application."""

# Provider names reported in PipelineResult.metadata.providersUsed
GEMINI_PROVIDER = "gemini"
OPENAI_PROVIDER = "openai"
FIGMA_PROVIDER = "figma"

# Idea enhancement temperature per creativity level
CREATIVITY_TEMPERATURES = {
    "high": 0.9,
    "medium": 0.7,
    "low": 0.5,
}

IDEA_MAX_TOKENS = 2000
DESIGN_TEMPERATURE = 0.8
DESIGN_MAX_TOKENS = 1000
SCHEMA_TEMPERATURE = 0.3
SCHEMA_MAX_TOKENS = 1500
CODE_TEMPERATURE = 0.3
CODE_MAX_TOKENS = 2500
CODE_TEXT_MAX_TOKENS = 4000

# Estimated token cost per stage, counted only when the stage's provider succeeded
STAGE_TOKEN_ESTIMATES = {
    "idea": 500,
    "design": 300,
    "schema": 800,
    "code": 1200,
}

# Figma REST API
FIGMA_API_BASE_URL = "https://api.figma.com/v1"
FIGMA_TIMEOUT_SECONDS = 15.0

DEFAULT_COLOR_PALETTE = ["#3b82f6", "#64748b", "#f59e0b", "#ffffff"]
EXTENDED_COLOR_PALETTE = [
    "#3b82f6", "#64748b", "#f59e0b", "#ffffff",
    "#000000", "#ef4444", "#10b981", "#8b5cf6",
]
DEFAULT_COMPONENTS = ["Button", "Input", "Card", "Badge", "Avatar", "Dialog"]
DEFAULT_SPACING = ["4px", "8px", "12px", "16px", "24px", "32px", "48px", "64px"]
DEFAULT_BORDER_RADIUS = ["4px", "8px", "12px", "16px"]
DEFAULT_SHADOWS = ["0 1px 3px rgba(0,0,0,0.1)", "0 4px 6px rgba(0,0,0,0.1)"]
