"""
Tests for the Gemini service module.
"""

import pytest
from unittest.mock import patch, MagicMock, AsyncMock

from matura.services.gemini_service import GeminiService


@pytest.fixture
def sample_prompt():
    """Fixture providing a sample prompt for testing."""
    return 'Analyze this application idea: "レシピを共有するアプリ"'


@pytest.fixture
def mock_gemini_client():
    """Fixture providing a mocked Gemini client."""
    with patch('matura.services.gemini_service.genai.Client') as mock_client:
        mock_client.return_value.aio.models.generate_content = AsyncMock()
        yield mock_client


@pytest.fixture
def gemini_service(mock_gemini_client):
    """Fixture providing a GeminiService instance with mocked dependencies."""
    return GeminiService(google_api_key="test_google_key", model="gemini-2.0-flash")


class TestGeminiService:
    """Tests for the GeminiService."""

    @pytest.mark.asyncio
    async def test_generate_success(self, gemini_service, sample_prompt, mock_gemini_client):
        """Test successful text generation with Gemini."""
        mock_response = MagicMock()
        mock_response.text = '```json\n{"enhanced": "x", "category": "creative"}\n```'
        mock_gemini_client.return_value.aio.models.generate_content.return_value = mock_response

        result = await gemini_service.generate(sample_prompt, temperature=0.9, max_tokens=2000)

        assert result.success
        assert "creative" in result.data

        call_kwargs = mock_gemini_client.return_value.aio.models.generate_content.call_args.kwargs
        assert call_kwargs["model"] == "gemini-2.0-flash"
        assert call_kwargs["contents"] == sample_prompt
        assert call_kwargs["config"] == {"temperature": 0.9, "max_output_tokens": 2000}

    @pytest.mark.asyncio
    async def test_generate_empty_response(self, gemini_service, sample_prompt, mock_gemini_client):
        """Test handling of an empty response from Gemini."""
        mock_response = MagicMock()
        mock_response.text = ""
        mock_gemini_client.return_value.aio.models.generate_content.return_value = mock_response

        result = await gemini_service.generate(sample_prompt)

        assert not result.success
        assert result.error == "empty response"

    @pytest.mark.asyncio
    async def test_generate_error(self, gemini_service, sample_prompt, mock_gemini_client):
        """Test error handling during generation."""
        mock_gemini_client.return_value.aio.models.generate_content.side_effect = Exception("API Error")

        with patch('matura.services.gemini_service.logger') as mock_logger:
            result = await gemini_service.generate(sample_prompt)

            assert not result.success
            assert result.error == "API Error"
            mock_logger.error.assert_called_once()

    def test_name(self, gemini_service):
        assert gemini_service.name == "gemini"
