from types import SimpleNamespace

import pytest

from sales_copilot.llm_scorer import (
    LLMClient, LLMResponseError, format_context, parse_json_content
)
from sales_copilot.settings import Settings, build_llm_client


ENV_KEYS = [
    "USE_REAL_AI", "OPENAI_API_KEY", "DEFAULT_LLM_MODEL", "LLM_TEMPERATURE",
    "LLM_MAX_TOKENS", "LLM_TIMEOUT_SECONDS", "ENVIRONMENT", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings.from_env()

        assert settings.use_llm is False
        assert settings.openai_api_key is None
        assert settings.llm_model == "gpt-4o-mini"
        assert settings.llm_temperature == 0.3
        assert settings.llm_max_tokens == 1000
        assert settings.log_level == "INFO"
        assert settings.llm_enabled is False

    def test_reads_environment(self, clean_env):
        clean_env.setenv("USE_REAL_AI", "TRUE")
        clean_env.setenv("OPENAI_API_KEY", "sk-test")
        clean_env.setenv("DEFAULT_LLM_MODEL", "gpt-4o")
        clean_env.setenv("LLM_MAX_TOKENS", "500")
        clean_env.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.use_llm is True
        assert settings.llm_model == "gpt-4o"
        assert settings.llm_max_tokens == 500
        assert settings.log_level == "DEBUG"
        assert settings.llm_enabled is True

    def test_placeholder_key_is_ignored(self, clean_env):
        clean_env.setenv("OPENAI_API_KEY", "sua_chave_aqui_quando_tiver")
        assert Settings.from_env().openai_api_key is None


class TestBuildClient:
    def test_disabled(self):
        assert build_llm_client(Settings(use_llm=False, openai_api_key="sk-test")) is None

    def test_missing_key(self):
        assert build_llm_client(Settings(use_llm=True)) is None

    def test_enabled(self):
        client = build_llm_client(Settings(use_llm=True, openai_api_key="sk-test", llm_model="gpt-4o"))

        assert isinstance(client, LLMClient)
        assert client.model == "gpt-4o"


class TestLLMClient:
    def test_requires_key(self):
        with pytest.raises(ValueError):
            LLMClient(api_key="")

    def test_dated_model_uses_longest_prefix(self):
        client = LLMClient(api_key="sk-test", model="gpt-4o-mini-2024-07-18")
        assert client.model_config["description"] == "Cost-effective GPT-4o variant"

    def test_model_info_without_temperature_support(self):
        info = LLMClient(api_key="sk-test", model="gpt-5-mini").get_model_info()

        assert info["temperature"] == 1.0
        assert info["config"]["token_param"] == "max_completion_tokens"

    def test_unknown_model(self):
        client = LLMClient(api_key="sk-test", model="local-llama")
        assert client.model_config["supports_json_mode"] is False


class FakeCompletions:
    """Records each create() call and replies with canned content or raises"""

    def __init__(self, content='{"type": "PRAGMATIC"}', error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def client_with_transport(model, **kwargs):
    client = LLMClient(api_key="sk-test", model=model, max_tokens=400)
    completions = FakeCompletions(**kwargs)
    client.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return client, completions


class TestCompleteJson:
    def test_chat_model_request(self):
        client, completions = client_with_transport("gpt-4o-mini")

        assert client.complete_json("Sistema", "Texto") == {"type": "PRAGMATIC"}
        assert len(completions.calls) == 1

        request = completions.calls[0]
        assert request["model"] == "gpt-4o-mini"
        assert request["messages"] == [
            {"role": "system", "content": "Sistema"},
            {"role": "user", "content": "Texto"},
        ]
        assert request["max_tokens"] == 400
        assert "max_completion_tokens" not in request
        assert request["temperature"] == 0.3
        assert request["response_format"] == {"type": "json_object"}

    def test_reasoning_model_merges_system_prompt(self):
        client, completions = client_with_transport("o1-mini")
        client.complete_json("Sistema", "Texto")

        request = completions.calls[0]
        assert request["messages"] == [{"role": "user", "content": "Sistema\n\nTexto"}]
        assert request["max_completion_tokens"] == 400
        assert "max_tokens" not in request
        assert "temperature" not in request
        assert "response_format" not in request

    def test_gpt5_skips_temperature(self):
        client, completions = client_with_transport("gpt-5-mini")
        client.complete_json("Sistema", "Texto")

        request = completions.calls[0]
        assert request["max_completion_tokens"] == 400
        assert "temperature" not in request
        assert request["response_format"] == {"type": "json_object"}

    def test_transport_error_is_wrapped_without_retry(self):
        client, completions = client_with_transport("gpt-4o", error=RuntimeError("connection reset"))

        with pytest.raises(LLMResponseError, match="connection reset"):
            client.complete_json("Sistema", "Texto")
        assert len(completions.calls) == 1

    def test_empty_reply(self):
        client, completions = client_with_transport("gpt-4o", content=None)

        with pytest.raises(LLMResponseError):
            client.complete_json("Sistema", "Texto")
        assert len(completions.calls) == 1


class TestParseJsonContent:
    def test_plain_object(self):
        assert parse_json_content('{"type": "PRAGMATIC"}') == {"type": "PRAGMATIC"}

    def test_fenced_object(self):
        assert parse_json_content('```json\n{"confidence": 80}\n```') == {"confidence": 80}
        assert parse_json_content('```\n{"confidence": 80}\n```') == {"confidence": 80}

    @pytest.mark.parametrize("content", [None, "", "   ", "not json", "[1, 2]", '"text"'])
    def test_rejects_non_objects(self, content):
        with pytest.raises(LLMResponseError):
            parse_json_content(content)


class TestFormatContext:
    def test_without_history(self):
        assert format_context("Oi") == 'TEXTO DA CONVERSA:\n"Oi"\n'

    def test_keeps_last_three_entries(self):
        context = format_context("Oi", ["a", "b", "c", "d"])

        assert context.startswith("CONTEXTO RECENTE DA CONVERSA:\n- b\n- c\n- d\n")
