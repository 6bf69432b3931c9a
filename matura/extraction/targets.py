"""
Field tables for the JSON shapes the free-text prompts ask for.

Each FieldRule names its default producer; missing or blank fields are filled
one at a time, never by swapping in a whole default object.
"""

from typing import Any, Dict, List

from matura.extraction.extractor import ExtractionTarget, FieldRule
from matura.extraction.synthesizer import CATEGORY_PROFILES, infer_category
from matura.models.blueprint import CATEGORIES
from matura.utils.constants import DEFAULT_COLOR_PALETTE

POTENTIALS = ("low", "medium", "high")


def as_text(value: Any, context: str) -> Any:
    return value.strip() if isinstance(value, str) else None


def as_text_list(value: Any, context: str) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def as_category(value: Any, context: str) -> str:
    category = str(value).strip().lower()
    # Models sometimes answer "a|b" or a catch-all; infer from the idea instead
    if category not in CATEGORIES:
        return infer_category(context)
    return category


def as_potential(value: Any, context: str) -> str:
    potential = str(value).strip().lower()
    return potential if potential in POTENTIALS else "medium"


def as_typography(value: Any, context: str) -> Dict[str, str]:
    if not isinstance(value, dict):
        return None
    typography = {key: str(value[key]) for key in ("heading", "body", "accent") if value.get(key)}
    typography.setdefault("heading", "Inter")
    typography.setdefault("body", typography["heading"])
    return typography


def default_features(context: str) -> List[str]:
    return list(CATEGORY_PROFILES[infer_category(context)].features)


def default_users(context: str) -> List[str]:
    return list(CATEGORY_PROFILES[infer_category(context)].users)


def default_business_logic(context: str) -> List[str]:
    return list(CATEGORY_PROFILES[infer_category(context)].business_logic)


def default_industry(context: str) -> str:
    return CATEGORY_PROFILES[infer_category(context)].industry


IDEA_TARGET = ExtractionTarget(
    name="idea",
    telltale_keys=("enhanced", "category"),
    primary_keys=("enhanced", "category", "keyFeatures", "targetUsers"),
    secondary_keys=("coreValue", "realProblem", "uniqueValue", "businessLogic", "insights", "businessPotential"),
    fields=(
        FieldRule("enhanced", lambda context: context or "専門的ソリューション", ("description",), as_text),
        FieldRule("category", infer_category, (), as_category),
        FieldRule("coreValue", lambda context: "利用者の本質的な課題解決", ("coreEssence",), as_text),
        FieldRule("realProblem", lambda context: "既存の手段では手間がかかり続かないこと", ("problem",), as_text),
        FieldRule("targetUsers", default_users, ("users",), as_text_list),
        FieldRule("keyFeatures", default_features, ("features",), as_text_list),
        FieldRule("businessLogic", default_business_logic, (), as_text_list),
        FieldRule("uniqueValue", lambda context: "特化型アプローチ", ("value",), as_text),
        FieldRule("industryContext", default_industry, ("industry",), as_text),
        FieldRule("variations", lambda context: [], (), as_text_list),
        FieldRule("insights", lambda context: ["本質的価値の提供"], ("technicalConsiderations",), as_text_list),
        FieldRule("businessPotential", lambda context: "medium", ("potential",), as_potential),
    ),
)

DESIGN_TARGET = ExtractionTarget(
    name="design",
    telltale_keys=("colorPalette", "mood"),
    primary_keys=("colorPalette", "typography", "components"),
    secondary_keys=("designStyle", "layout", "mood", "inspiration"),
    fields=(
        FieldRule("colorPalette", lambda context: list(DEFAULT_COLOR_PALETTE), ("colors",), as_text_list),
        FieldRule("designStyle", lambda context: "modern", ("style",), as_text),
        FieldRule("typography", lambda context: {"heading": "Inter", "body": "Inter"}, (), as_typography),
        FieldRule("components", lambda context: ["Card", "Button", "Input"], (), as_text_list),
        FieldRule("layout", lambda context: "card", (), as_text),
        FieldRule("mood", lambda context: "modern", (), as_text),
        FieldRule("inspirationNote", lambda context: "Clean and intuitive design", ("inspiration",), as_text),
    ),
)
