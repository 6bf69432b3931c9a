"""
Tests for the provider factory and the command line interface.
"""

import json
import pytest
from unittest.mock import patch, MagicMock

from typer.testing import CliRunner

from matura.factory import create_pipeline, create_provider
from matura.main import app
from matura.pipeline import GenerationPipeline
from matura.services.ai_service import UnconfiguredService
from matura.services.gemini_service import GeminiService
from matura.services.openai_service import OpenAIService


@pytest.fixture
def mock_config():
    """Fixture providing a config with every credential set."""
    with patch('matura.factory.config') as config:
        config.google_ai_api_key = "google-key"
        config.google_ai_model = "gemini-2.0-flash"
        config.openai_api_key = "openai-key"
        config.openai_model = "gpt-4o"
        config.openai_text_model = "gpt-4o-mini"
        config.figma_api_key = None
        config.figma_file_id = None
        config.generation_defaults = {"creativityLevel": "high"}
        yield config


class TestFactory:
    """Tests for create_provider and create_pipeline."""

    def test_create_providers(self, mock_config):
        with patch('matura.services.gemini_service.genai.Client'), \
                patch('matura.services.openai_service.AsyncOpenAI'):
            assert isinstance(create_provider("gemini"), GeminiService)
            assert isinstance(create_provider("openai"), OpenAIService)

    def test_missing_key_gives_unconfigured_provider(self, mock_config):
        mock_config.google_ai_api_key = None

        provider = create_provider("gemini")

        assert isinstance(provider, UnconfiguredService)
        assert provider.name == "gemini"

    def test_unsupported_provider(self, mock_config):
        with pytest.raises(ValueError):
            create_provider("ollama")

    def test_unsupported_structured_provider(self, mock_config):
        with pytest.raises(ValueError):
            create_pipeline(structured_provider="gemini")

    def test_create_pipeline_uses_config_defaults(self, mock_config):
        mock_config.google_ai_api_key = None
        mock_config.openai_api_key = None

        pipeline = create_pipeline()

        assert isinstance(pipeline, GenerationPipeline)
        assert pipeline.resolve_config().creativityLevel == "high"

    @pytest.mark.asyncio
    async def test_unconfigured_provider_always_fails(self):
        provider = UnconfiguredService("openai")
        assert not (await provider.generate("prompt")).success
        assert not (await provider.invoke(MagicMock(), "prompt", "system")).success


class TestCli:
    """Tests for the matura command line."""

    @pytest.fixture
    def offline_pipeline(self):
        pipeline = GenerationPipeline(
            free_text=UnconfiguredService("gemini"),
            structured=UnconfiguredService("openai"),
        )
        with patch('matura.main.create_pipeline', return_value=pipeline):
            yield pipeline

    def test_generate_prints_blueprint(self, offline_pipeline):
        result = CliRunner().invoke(app, ["generate", "タスクを管理するアプリ", "--no-design-system"])

        assert result.exit_code == 0
        start = result.stdout.index("{")
        end = result.stdout.rindex("}") + 1
        payload = json.loads(result.stdout[start:end])
        assert payload["idea"]["category"] == "productivity"
        assert payload["schema"]["tableName"] == "app_data"

    def test_generate_writes_output_file(self, offline_pipeline, tmp_path):
        output = tmp_path / "blueprint.json"

        result = CliRunner().invoke(app, ["generate", "レシピを共有するアプリ", "--output", str(output)])

        assert result.exit_code == 0
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert payload["code"]["componentCode"]
