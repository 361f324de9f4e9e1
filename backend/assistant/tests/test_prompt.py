import pytest
from unittest.mock import Mock, patch

import openai
from pydantic import BaseModel

from assistant.prompt import PromptFlow, PromptFlowError, strip_code_fences
from jobtrack.config import settings


class GreetingInput(BaseModel):
    name: str


class GreetingOutput(BaseModel):
    greeting: str
    length: int


def _response(content):
    response = Mock()
    response.choices = [Mock()]
    response.choices[0].message.content = content
    return response


def _flow(client=None):
    return PromptFlow(
        name="greeting",
        input_model=GreetingInput,
        output_model=GreetingOutput,
        template="Greet {name} and return JSON like {{\"greeting\": \"...\", \"length\": 0}}",
        client=client,
    )


class TestStripCodeFences:
    def test_plain_json_unchanged(self):
        assert strip_code_fences('{"a": 1}') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'


class TestPromptFlow:
    def test_render_fills_template(self):
        prompt = _flow().render({"name": "Ada"})

        assert prompt.startswith("Greet Ada")
        assert '{"greeting": "...", "length": 0}' in prompt

    def test_render_validates_input(self):
        with pytest.raises(PromptFlowError):
            _flow().render({"nom": "Ada"})

    def test_run_sync_sends_one_request(self):
        client = Mock()
        client.chat.completions.create.return_value = _response('{"greeting": "Hello Ada", "length": 9}')
        flow = _flow(client)

        result = flow.run_sync(GreetingInput(name="Ada"))

        assert result == GreetingOutput(greeting="Hello Ada", length=9)
        client.chat.completions.create.assert_called_once()
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == settings.openai_model
        assert kwargs["messages"][0]["role"] == "system"
        assert "Greet Ada" in kwargs["messages"][1]["content"]

    def test_parse_response_with_markdown(self):
        result = _flow(Mock())._parse_response('```json\n{"greeting": "Hi", "length": 2}\n```')

        assert result.greeting == "Hi"

    def test_parse_response_invalid_json(self):
        with pytest.raises(PromptFlowError) as exc_info:
            _flow(Mock())._parse_response("invalid json {{{")

        assert exc_info.value.flow_name == "greeting"

    def test_parse_response_schema_mismatch(self):
        with pytest.raises(PromptFlowError):
            _flow(Mock())._parse_response('{"greeting": "Hi"}')

    def test_empty_response(self):
        client = Mock()
        client.chat.completions.create.return_value = _response("")

        with pytest.raises(PromptFlowError):
            _flow(client).run_sync({"name": "Ada"})

    def test_provider_error_is_wrapped(self):
        client = Mock()
        client.chat.completions.create.side_effect = openai.OpenAIError("quota exceeded")

        with pytest.raises(PromptFlowError) as exc_info:
            _flow(client).run_sync({"name": "Ada"})

        assert "quota exceeded" in str(exc_info.value)

    def test_missing_api_key(self):
        with patch.object(settings, "openai_api_key", ""):
            with pytest.raises(PromptFlowError):
                _flow().run_sync({"name": "Ada"})

    @patch("assistant.prompt.openai.OpenAI")
    def test_client_created_from_settings(self, mock_openai_class):
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _response('{"greeting": "Hi", "length": 2}')
        mock_openai_class.return_value = mock_client

        with patch.object(settings, "openai_api_key", "test-key"):
            _flow().run_sync({"name": "Ada"})

        mock_openai_class.assert_called_once_with(api_key="test-key")

    async def test_run_is_async(self):
        client = Mock()
        client.chat.completions.create.return_value = _response('{"greeting": "Hi", "length": 2}')

        result = await _flow(client).run({"name": "Ada"})

        assert result.length == 2
