"""
Design system integration stage.

Pulls a design file from the design token provider and derives palette,
typography and component tokens from its document tree. Any problem
(missing credentials, HTTP error, odd document) yields the built-in design
system instead; this stage never raises.
"""

from typing import Any, Dict, List, Optional

from matura.errors import DesignTokenUnavailable
from matura.models.blueprint import DesignSystemRecord, Typography
from matura.services.ai_service import DesignTokenProvider
from matura.stages.base import DESIGN_TOKEN_ROLE, StageOutput
from matura.utils.constants import (
    DEFAULT_BORDER_RADIUS,
    DEFAULT_COMPONENTS,
    DEFAULT_SHADOWS,
    DEFAULT_SPACING,
    EXTENDED_COLOR_PALETTE,
)
from matura.utils.logger import logger

MAX_COLORS = 8
MAX_COMPONENTS = 10

DEFAULT_DESIGN_SYSTEM = DesignSystemRecord(
    source="default",
    document=None,
    colorPalette=["#6366f1", "#8b5cf6", "#06b6d4", "#ffffff"],
    typography=Typography(
        heading="Inter, system-ui, sans-serif",
        body="Inter, system-ui, sans-serif",
        accent="JetBrains Mono, monospace",
    ),
    components=["Card", "Button", "Input", "Badge", "Modal", "Table", "Form"],
    spacing=["8px", "16px", "24px", "32px", "48px", "64px"],
    borderRadius=["8px", "12px", "16px", "24px"],
    shadows=[
        "0 1px 3px rgba(0,0,0,0.12), 0 1px 2px rgba(0,0,0,0.24)",
        "0 3px 6px rgba(0,0,0,0.16), 0 3px 6px rgba(0,0,0,0.23)",
        "0 10px 20px rgba(0,0,0,0.19), 0 6px 6px rgba(0,0,0,0.23)",
    ],
)


def _walk(node: Dict[str, Any]):
    stack = [node]
    while stack:
        current = stack.pop()
        if not isinstance(current, dict):
            continue
        yield current
        children = current.get("children") or []
        # Reverse so nodes come out in document order
        stack.extend(reversed(children))


def _to_hex(color: Dict[str, float]) -> str:
    channels = [max(0, min(255, round(float(color.get(c, 0)) * 255))) for c in ("r", "g", "b")]
    return "#" + "".join(f"{value:02x}" for value in channels)


def extract_colors(document: Dict[str, Any]) -> List[str]:
    """Unique SOLID fill colors in document order, padded to four."""
    colors = []
    for node in _walk(document):
        for fill in node.get("fills") or []:
            if isinstance(fill, dict) and fill.get("type") == "SOLID" and isinstance(fill.get("color"), dict):
                hex_color = _to_hex(fill["color"])
                if hex_color not in colors:
                    colors.append(hex_color)
    colors = colors[:MAX_COLORS]
    while len(colors) < 4:
        colors.append(EXTENDED_COLOR_PALETTE[len(colors)])
    return colors


def extract_typography(document: Dict[str, Any]) -> Typography:
    fonts = []
    for node in _walk(document):
        family = (node.get("style") or {}).get("fontFamily")
        if family and family not in fonts:
            fonts.append(family)
    heading = fonts[0] if fonts else "Inter"
    return Typography(
        heading=heading,
        body=fonts[1] if len(fonts) > 1 else heading,
        accent=fonts[2] if len(fonts) > 2 else "Playfair Display",
    )


def extract_components(document: Dict[str, Any]) -> List[str]:
    names = [node["name"] for node in _walk(document) if node.get("type") == "COMPONENT" and node.get("name")]
    merged = list(dict.fromkeys(names + DEFAULT_COMPONENTS))
    return merged[:MAX_COMPONENTS]


def derive_design_system(file_data: Dict[str, Any]) -> DesignSystemRecord:
    """Design system record embedding the raw file and the tokens derived from it."""
    document = file_data.get("document") if isinstance(file_data, dict) else None
    if not isinstance(document, dict):
        logger.warning("Design file has no document node, keeping raw file with fallback tokens")
        document = {}

    return DesignSystemRecord(
        source="external-integrated",
        document=file_data,
        colorPalette=extract_colors(document),
        typography=extract_typography(document),
        components=extract_components(document),
        spacing=list(DEFAULT_SPACING),
        borderRadius=list(DEFAULT_BORDER_RADIUS),
        shadows=list(DEFAULT_SHADOWS),
    )


class DesignSystemStage:
    """Optional integration with an external design file."""

    name = "design_system"

    def __init__(self, provider: Optional[DesignTokenProvider], api_key: Optional[str], file_id: Optional[str]):
        self.provider = provider
        self.api_key = api_key
        self.file_id = file_id

    async def run(self) -> StageOutput:
        if self.provider is None:
            logger.info("No design token provider configured, using default design system")
            return StageOutput(self.name, DEFAULT_DESIGN_SYSTEM)
        if not self.api_key:
            logger.info("Design token API key not available, using default design system")
            return StageOutput(self.name, DEFAULT_DESIGN_SYSTEM)
        if not self.file_id:
            logger.info("Design file ID not configured, using default design system")
            return StageOutput(self.name, DEFAULT_DESIGN_SYSTEM)

        try:
            file_data = await self.provider.fetch(self.file_id, self.api_key)
        except DesignTokenUnavailable as e:
            logger.warning(f"Design token provider unavailable, falling back to default: {e}")
            return StageOutput(self.name, DEFAULT_DESIGN_SYSTEM)
        except Exception as e:
            logger.error(f"Design token fetch failed unexpectedly: {e}")
            return StageOutput(self.name, DEFAULT_DESIGN_SYSTEM)

        record = derive_design_system(file_data)
        logger.info(f"Design system integrated: colors={record.colorPalette[:3]}, heading={record.typography.heading}")
        return StageOutput(self.name, record, self.provider.name, DESIGN_TOKEN_ROLE)
