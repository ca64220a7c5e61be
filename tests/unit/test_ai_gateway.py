"""Unit tests for the AI gateway provider."""

from unittest.mock import MagicMock, patch

import httpx
import pytest
from openai import APIStatusError, APITimeoutError, RateLimitError

from hirescore.core.config import settings
from hirescore.core.exceptions import AIServiceError, ParseError, RateLimitedError
from hirescore.services.llm.profiles import get_scoring_profile
from hirescore.services.llm.providers import GatewayProvider

GATEWAY_REQUEST = httpx.Request("POST", "https://gateway.test/v1/chat/completions")


def tool_response(arguments: str | None):
    """Build a chat completion response carrying one tool call."""
    message = MagicMock()
    message.content = None
    if arguments is None:
        message.tool_calls = []
    else:
        tool_call = MagicMock()
        tool_call.function.arguments = arguments
        message.tool_calls = [tool_call]
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


class TestGatewayProvider:
    """Tests for GatewayProvider."""

    @pytest.fixture
    def client(self):
        """Mocked OpenAI client."""
        with patch("hirescore.services.llm.providers.OpenAI") as mock_openai:
            client = MagicMock()
            mock_openai.return_value = client
            yield client

    @pytest.fixture
    def provider(self, client):
        return GatewayProvider(base_url="https://gateway.test/v1", api_key="key")

    def test_sdk_retries_disabled(self):
        with patch("hirescore.services.llm.providers.OpenAI") as mock_openai:
            GatewayProvider(base_url="https://gateway.test/v1", api_key="key", timeout=5)

        kwargs = mock_openai.call_args.kwargs
        assert kwargs["max_retries"] == 0
        assert kwargs["timeout"] == 5
        assert kwargs["base_url"] == "https://gateway.test/v1"

    @pytest.mark.asyncio
    async def test_score_resume_forces_tool(self, provider, client):
        """Scoring forces the profile's tool and returns its raw arguments."""
        client.chat.completions.create.return_value = tool_response('{"overall_score": 80}')
        profile = get_scoring_profile("standard")

        raw = await provider.score_resume(profile, "5 years Python backend engineer")

        assert raw == '{"overall_score": 80}'
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == settings.analysis_model
        assert kwargs["tool_choice"]["function"]["name"] == "analyze_candidate"
        assert "5 years Python backend engineer" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_detailed_profile_model(self, provider, client):
        client.chat.completions.create.return_value = tool_response("{}")

        await provider.score_resume(get_scoring_profile("detailed"), "resume")

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == settings.detailed_analysis_model
        properties = kwargs["tools"][0]["function"]["parameters"]["properties"]
        assert "experience_details" in properties

    @pytest.mark.asyncio
    async def test_missing_tool_call(self, provider, client):
        client.chat.completions.create.return_value = tool_response(None)

        with pytest.raises(ParseError):
            await provider.score_resume(get_scoring_profile(), "resume")

    @pytest.mark.asyncio
    async def test_rate_limit_maps_to_rate_limited(self, provider, client):
        client.chat.completions.create.side_effect = RateLimitError(
            "Rate limited",
            response=httpx.Response(429, request=GATEWAY_REQUEST),
            body=None,
        )

        with pytest.raises(RateLimitedError) as exc_info:
            await provider.evaluate_match({"job_role": "SRE"}, {"name": "Jane"})

        assert exc_info.value.status_code == 429
        assert exc_info.value.service == "matching"

    @pytest.mark.asyncio
    async def test_status_error_maps_to_service_error(self, provider, client):
        client.chat.completions.create.side_effect = APIStatusError(
            "Payment required",
            response=httpx.Response(402, request=GATEWAY_REQUEST),
            body=None,
        )

        with pytest.raises(AIServiceError) as exc_info:
            await provider.score_resume(get_scoring_profile(), "resume")

        assert not isinstance(exc_info.value, RateLimitedError)
        assert exc_info.value.status_code == 402

    @pytest.mark.asyncio
    async def test_timeout(self, provider, client):
        client.chat.completions.create.side_effect = APITimeoutError(request=GATEWAY_REQUEST)

        with pytest.raises(AIServiceError) as exc_info:
            await provider.score_resume(get_scoring_profile(), "resume")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_extract_document_text(self, provider, client):
        """Documents are sent as a data URL and the text is stripped."""
        response = tool_response(None)
        response.choices[0].message.content = "  Jane Doe\nPython  "
        client.chat.completions.create.return_value = response

        text = await provider.extract_document_text("cv.pdf", "application/pdf", "QUJD")

        assert text == "Jane Doe\nPython"
        content = client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert content[1]["image_url"]["url"] == "data:application/pdf;base64,QUJD"

    @pytest.mark.asyncio
    async def test_empty_choices(self, provider, client):
        response = MagicMock()
        response.choices = []
        client.chat.completions.create.return_value = response

        with pytest.raises(AIServiceError):
            await provider.extract_document_text("cv.pdf", "application/pdf", "QUJD")

    @pytest.mark.asyncio
    async def test_generate_interview_questions(self, provider, client):
        client.chat.completions.create.return_value = tool_response('{"questions": []}')

        raw = await provider.generate_interview_questions("SRE", {"name": "Jane", "skills": []})

        assert raw == '{"questions": []}'
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["tool_choice"]["function"]["name"] == "generate_questions"
