"""
Unit tests for GeminiClient.

No real API keys needed. Real-mode tests patch genai.Client, and grounding
metadata is exercised against SimpleNamespace stand-ins for SDK responses.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from kenydrive.ai import gemini_client as gemini_module
from kenydrive.ai.gemini_client import GeminiClient, GroundedText, _grounding_citations


class TestGeminiClientMockMode:
    """GeminiClient in mock mode (default in tests)."""

    def setup_method(self):
        import kenydrive.core.config as cfg

        self._original = cfg.settings.ai_mock_mode
        cfg.settings.ai_mock_mode = True
        self.client = GeminiClient()

    def teardown_method(self):
        import kenydrive.core.config as cfg

        cfg.settings.ai_mock_mode = self._original

    async def test_generate_with_search_returns_grounded_text(self):
        result = await self.client.generate_with_search("prompt", response_key="peak_predictions")
        assert isinstance(result, GroundedText)
        assert result.text.startswith("```json")
        assert len(result.citations) == 2

    async def test_unknown_key_returns_default(self):
        result = await self.client.generate_with_search("prompt", response_key="nonexistent_key")
        assert "MOCK" in result.text
        assert result.citations == []

    async def test_mock_citations_are_copied(self):
        first = await self.client.generate_with_search("p", response_key="peak_predictions")
        first.citations.clear()
        second = await self.client.generate_with_search("p", response_key="peak_predictions")
        assert len(second.citations) == 2


class TestGeminiClientMissingKey:
    def setup_method(self):
        import kenydrive.core.config as cfg

        self._mock = cfg.settings.ai_mock_mode
        self._key = cfg.settings.gemini_api_key
        cfg.settings.ai_mock_mode = False
        cfg.settings.gemini_api_key = ""

    def teardown_method(self):
        import kenydrive.core.config as cfg

        cfg.settings.ai_mock_mode = self._mock
        cfg.settings.gemini_api_key = self._key

    def test_falls_back_to_mock_mode(self):
        assert GeminiClient().mock_mode is True


class TestGroundingCitations:
    def _response(self, chunks):
        metadata = SimpleNamespace(grounding_chunks=chunks)
        return SimpleNamespace(candidates=[SimpleNamespace(grounding_metadata=metadata)])

    def test_extracts_web_chunks(self):
        response = self._response([
            SimpleNamespace(web=SimpleNamespace(title="Daily Nation", uri="https://nation.africa/x")),
            SimpleNamespace(web=None),
            SimpleNamespace(web=SimpleNamespace(title=None, uri="https://example.com/y")),
        ])
        assert _grounding_citations(response) == [
            {"title": "Daily Nation", "uri": "https://nation.africa/x"},
            {"title": "", "uri": "https://example.com/y"},
        ]

    def test_no_candidates(self):
        assert _grounding_citations(SimpleNamespace(candidates=[])) == []

    def test_no_grounding_metadata(self):
        response = SimpleNamespace(candidates=[SimpleNamespace(grounding_metadata=None)])
        assert _grounding_citations(response) == []


class TestGeminiClientRealMode:
    """Real mode with the SDK client replaced; checks the request it builds."""

    def setup_method(self):
        import kenydrive.core.config as cfg

        self._mock = cfg.settings.ai_mock_mode
        self._key = cfg.settings.gemini_api_key
        cfg.settings.ai_mock_mode = False
        cfg.settings.gemini_api_key = "test-key"

    def teardown_method(self):
        import kenydrive.core.config as cfg

        cfg.settings.ai_mock_mode = self._mock
        cfg.settings.gemini_api_key = self._key

    def _client(self, sdk_client):
        with patch.object(gemini_module.genai, "Client", return_value=sdk_client) as factory:
            client = GeminiClient()
        factory.assert_called_once_with(api_key="test-key")
        return client

    def _sdk(self, **generate_kwargs):
        sdk_client = MagicMock()
        sdk_client.aio.models.generate_content = AsyncMock(**generate_kwargs)
        return sdk_client

    async def test_sends_search_grounded_json_request(self):
        chunk = SimpleNamespace(web=SimpleNamespace(title="KeNHA", uri="https://example.com/k"))
        response = SimpleNamespace(
            text='{"summary": "ok"}',
            candidates=[SimpleNamespace(grounding_metadata=SimpleNamespace(grounding_chunks=[chunk]))],
        )
        sdk_client = self._sdk(return_value=response)
        client = self._client(sdk_client)
        assert client.mock_mode is False

        result = await client.generate_with_search("forecast Westlands", response_key="peak_predictions")

        assert result.text == '{"summary": "ok"}'
        assert result.citations == [{"title": "KeNHA", "uri": "https://example.com/k"}]

        kwargs = sdk_client.aio.models.generate_content.await_args.kwargs
        assert kwargs["model"] == client.model_name
        assert kwargs["contents"] == "forecast Westlands"
        config = kwargs["config"]
        assert config.response_mime_type == "application/json"
        assert len(config.tools) == 1
        assert config.tools[0].google_search is not None

    async def test_empty_text_becomes_empty_string(self):
        sdk_client = self._sdk(return_value=SimpleNamespace(text=None, candidates=[]))
        result = await self._client(sdk_client).generate_with_search("p")
        assert result == GroundedText(text="", citations=[])

    async def test_sdk_errors_are_logged_and_raised(self, caplog):
        sdk_client = self._sdk(side_effect=RuntimeError("quota exhausted"))
        client = self._client(sdk_client)
        with pytest.raises(RuntimeError, match="quota exhausted"):
            await client.generate_with_search("p")
        assert any(
            r.levelname == "ERROR" and "quota exhausted" in r.getMessage() for r in caplog.records
        )
