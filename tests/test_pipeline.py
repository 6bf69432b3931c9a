"""
Tests for the GenerationPipeline.
"""

import asyncio
import json
import time
import pytest

from matura.api import generate_app
from matura.models.blueprint import CATEGORIES, GenerationConfig, PipelineResult, ProviderResult
from matura.pipeline import GenerationPipeline
from matura.services.ai_service import (
    DesignTokenProvider,
    FreeTextGenerator,
    StructuredGenerator,
    UnconfiguredService,
)

FESTIVAL_IDEA = "学園祭の出し物を紹介するページを作りたい"

IDEA_JSON = {
    "enhanced": "学園祭の各クラスの出し物を一覧・検索できる紹介ページ",
    "category": "entertainment",
    "coreValue": "来場者が見たい出し物にすぐたどり着ける",
    "realProblem": "紙のパンフレットでは場所や時間が探しにくい",
    "targetUsers": ["来場者", "実行委員"],
    "keyFeatures": ["出し物一覧", "教室マップ", "タイムテーブル"],
    "businessLogic": ["開催時間で絞り込み"],
    "uniqueValue": "当日の混雑も見える",
    "industryContext": "学校行事",
    "insights": ["スマホ閲覧が中心"],
    "businessPotential": "medium",
}

DESIGN_JSON = {
    "colorPalette": ["#ff7f50", "#2e86ab", "#f6c85f", "#fffdf7"],
    "designStyle": "playful",
    "typography": {"heading": "M PLUS Rounded 1c", "body": "Noto Sans JP"},
    "components": ["Card", "Badge", "Tabs"],
    "layout": "grid",
    "mood": "festive",
    "inspiration": "手作りの看板",
}

SCHEMA_DATA = {
    "tableName": "festival_exhibits",
    "fields": [
        {"name": "title", "type": "string", "required": True, "label": "出し物名"},
        {"name": "classroom", "type": "string", "label": "教室"},
        {"name": "starts_at", "type": "datetime", "label": "開始時刻"},
    ],
    "businessLogic": ["開催時間で絞り込み"],
}

CODE_DATA = {
    "componentName": "FestivalExhibitBoard",
    "componentCode": "export default function FestivalExhibitBoard() { return <div />; }",
    "typeDefinitions": "export interface Exhibit { title: string }",
}


class FakeFreeText(FreeTextGenerator):
    """Answers idea and design prompts with fenced JSON after ``delay`` seconds."""

    name = "fake-text"

    def __init__(self, delay: float = 0.0, fail: bool = False):
        self.delay = delay
        self.fail = fail
        self.calls = []

    async def generate(self, prompt, temperature=0.7, max_tokens=2048):
        started = time.monotonic()
        await asyncio.sleep(self.delay)
        self.calls.append((started, time.monotonic(), temperature))
        if self.fail:
            return ProviderResult(success=False, error="unavailable")
        payload = IDEA_JSON if prompt.startswith("Analyze this application idea") else DESIGN_JSON
        return ProviderResult(success=True, data=f"Result:\n```json\n{json.dumps(payload, ensure_ascii=False)}\n```")


class FakeStructured(StructuredGenerator):
    """Returns canned function arguments keyed by function name."""

    name = "fake-structured"

    def __init__(self):
        self.calls = []

    async def invoke(self, function_schema, prompt, system_instruction, temperature=0.3, max_tokens=2048):
        self.calls.append((function_schema.name, prompt))
        if function_schema.name == "generate_advanced_schema":
            return ProviderResult(success=True, data=SCHEMA_DATA)
        return ProviderResult(success=True, data=CODE_DATA)


class FakeDesignTokens(DesignTokenProvider):
    name = "fake-figma"

    def __init__(self):
        self.fetch_count = 0

    async def fetch(self, file_id, api_key):
        self.fetch_count += 1
        return {"document": {"children": [
            {"type": "COMPONENT", "name": "ExhibitCard",
             "fills": [{"type": "SOLID", "color": {"r": 0, "g": 0, "b": 0}}]},
        ]}}


@pytest.fixture
def free_text():
    return FakeFreeText()


@pytest.fixture
def structured():
    return FakeStructured()


@pytest.fixture
def design_tokens():
    return FakeDesignTokens()


@pytest.fixture
def pipeline(free_text, structured, design_tokens):
    """Fixture providing a GenerationPipeline wired to fake providers."""
    return GenerationPipeline(
        free_text=free_text,
        structured=structured,
        code_text_generator=free_text,
        design_tokens=design_tokens,
        figma_api_key="figma-key",
        figma_file_id="FILE",
    )


def assert_complete(result: PipelineResult):
    assert result.idea.category in CATEGORIES
    assert result.idea.enhanced
    assert len(result.design.colorPalette) == 4
    assert result.schema_.fields
    assert result.code.componentCode
    assert result.metadata.processingTimeMs >= 0


class TestGenerationPipeline:
    """Tests for GenerationPipeline.generate_app."""

    @pytest.mark.asyncio
    async def test_end_to_end_without_design_system(self, pipeline, design_tokens):
        result = await pipeline.generate_app(
            FESTIVAL_IDEA, {"creativityLevel": "medium", "useDesignSystem": False}
        )

        assert_complete(result)
        assert result.idea.original == FESTIVAL_IDEA
        assert result.idea.category == "entertainment"
        assert result.design.source == "default"
        assert result.schema_.tableName == "festival_exhibits"
        assert result.code.componentName == "FestivalExhibitBoard"
        assert "fake-figma" not in result.metadata.providersUsed
        assert result.metadata.providersUsed == ["fake-text", "fake-structured"]
        assert design_tokens.fetch_count == 0

    @pytest.mark.asyncio
    async def test_design_system_merged(self, pipeline, design_tokens):
        result = await pipeline.generate_app(FESTIVAL_IDEA)

        assert design_tokens.fetch_count == 1
        assert result.design.source == "external-integrated"
        assert result.design.colorPalette[0] == "#000000"
        assert "ExhibitCard" in result.design.components
        assert result.metadata.providersUsed == ["fake-text", "fake-figma", "fake-structured"]
        assert result.metadata.qualityScores.design == 0.98

    @pytest.mark.asyncio
    async def test_schema_generated_once_and_shared(self, pipeline, structured):
        result = await pipeline.generate_app(FESTIVAL_IDEA, {"useDesignSystem": False})

        names = [name for name, _ in structured.calls]
        assert names == ["generate_advanced_schema", "generate_hybrid_react_component"]
        code_prompt = structured.calls[1][1]
        assert result.schema_.tableName in code_prompt

    @pytest.mark.asyncio
    async def test_phase_one_runs_concurrently(self, structured):
        free_text = FakeFreeText(delay=0.2)
        pipeline = GenerationPipeline(free_text=free_text, structured=structured)

        await pipeline.generate_app(FESTIVAL_IDEA, {"useDesignSystem": False})

        starts = [start for start, _, _ in free_text.calls]
        ends = [end for _, end, _ in free_text.calls]
        assert len(free_text.calls) == 2
        assert max(ends) - min(starts) < 0.35

    @pytest.mark.asyncio
    async def test_creativity_level_reaches_idea_stage(self, pipeline, free_text):
        await pipeline.generate_app(FESTIVAL_IDEA, GenerationConfig(creativityLevel="high", useDesignSystem=False))

        temperatures = sorted(temperature for _, _, temperature in free_text.calls)
        assert temperatures == [0.8, 0.9]

    @pytest.mark.asyncio
    async def test_total_provider_outage(self):
        pipeline = GenerationPipeline(
            free_text=UnconfiguredService("gemini"),
            structured=UnconfiguredService("openai"),
            code_text_generator=UnconfiguredService("openai"),
            design_tokens=None,
        )

        result = await pipeline.generate_app(FESTIVAL_IDEA)

        assert_complete(result)
        assert result.idea.original == FESTIVAL_IDEA
        assert result.schema_.tableName == "app_data"
        assert result.metadata.providersUsed == []
        assert result.metadata.tokenUsage.total == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_idea", ["", "   ", "🎉🎉🎉", "!!!"])
    async def test_degenerate_input(self, user_idea):
        pipeline = GenerationPipeline(
            free_text=FakeFreeText(fail=True),
            structured=UnconfiguredService("openai"),
        )

        result = await pipeline.generate_app(user_idea)

        assert_complete(result)
        assert result.code.componentName == "CreativeAppManager"

    @pytest.mark.asyncio
    async def test_failures_do_not_raise_from_stages(self, structured):
        class RaisingFreeText(FreeTextGenerator):
            name = "raising"

            async def generate(self, prompt, temperature=0.7, max_tokens=2048):
                raise ConnectionError("reset by peer")

        pipeline = GenerationPipeline(free_text=RaisingFreeText(), structured=structured)

        result = await pipeline.generate_app("タスクを管理するアプリ", {"useDesignSystem": False})

        assert result.idea.category == "productivity"
        assert "raising" not in result.metadata.providersUsed

    @pytest.mark.asyncio
    async def test_malformed_structured_arguments_still_resolve(self):
        class SloppyStructured(FakeStructured):
            async def invoke(self, function_schema, prompt, system_instruction, temperature=0.3, max_tokens=2048):
                if function_schema.name == "generate_advanced_schema":
                    fields = [{"name": "done", "type": "boolean", "defaultValue": False}]
                    return ProviderResult(success=True, data={"tableName": "tasks", "fields": fields})
                return ProviderResult(success=True, data={**CODE_DATA, "customHooks": ["useX"]})

        pipeline = GenerationPipeline(free_text=FakeFreeText(fail=True), structured=SloppyStructured())

        result = await pipeline.generate_app("タスクを管理するアプリ", {"useDesignSystem": False})

        assert_complete(result)
        assert result.schema_.tableName == "tasks"
        assert result.schema_.fields[0].defaultValue == "false"
        assert result.code.componentName != "FestivalExhibitBoard"


class TestResolveConfig:
    """Tests for layering per-call config over defaults."""

    def test_defaults_then_overrides(self, free_text, structured):
        pipeline = GenerationPipeline(
            free_text=free_text, structured=structured,
            defaults={"creativityLevel": "low", "useDesignSystem": False},
        )

        assert pipeline.resolve_config().creativityLevel == "low"
        assert pipeline.resolve_config({"creativityLevel": "high"}).creativityLevel == "high"
        resolved = pipeline.resolve_config(GenerationConfig(mode="creative"))
        assert resolved.mode == "creative"
        assert resolved.creativityLevel == "low"
        assert resolved.useDesignSystem is False

    def test_builtin_defaults(self, free_text, structured):
        resolved = GenerationPipeline(free_text=free_text, structured=structured).resolve_config(None)
        assert resolved == GenerationConfig(
            mode="balanced", useDesignSystem=True, creativityLevel="medium", qualityPriority="quality"
        )


class TestGenerateApp:
    """Tests for the public entry point."""

    @pytest.mark.asyncio
    async def test_uses_given_pipeline(self, pipeline):
        result = await generate_app(FESTIVAL_IDEA, {"useDesignSystem": False}, pipeline=pipeline)
        assert isinstance(result, PipelineResult)
        assert result.code.componentName == "FestivalExhibitBoard"
