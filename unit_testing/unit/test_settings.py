"""
Unit tests for environment-driven settings.
"""

from aiconic.config import AgentConfig, LLMConfig, DEFAULT_ICON_SET_STYLES


class TestLLMConfig:

    def test_defaults(self, monkeypatch):
        for name in ("OPENAI_API_KEY", "LLM_API_KEY", "OPENAI_BASE_URL", "LLM_API_BASE",
                     "LLM_MODEL_NAME", "AICONIC_AGENT_MODEL", "AICONIC_LLM_TIMEOUT_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        config = LLMConfig.from_env()

        assert config.api_key is None
        assert not config.is_configured
        assert config.base_url == "https://api.openai.com/v1"
        assert config.agent_model == "gpt-4o-mini"
        assert config.request_timeout_seconds == 60.0

    def test_fallback_variables(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
        monkeypatch.delenv("AICONIC_ICON_MODEL", raising=False)
        monkeypatch.setenv("LLM_API_KEY", "sk-fallback")
        monkeypatch.setenv("LLM_API_BASE", "https://llm.example.com/v1")
        monkeypatch.setenv("LLM_MODEL_NAME", "qwen-plus")
        monkeypatch.setenv("AICONIC_AGENT_MODEL", "gpt-4o")

        config = LLMConfig.from_env()

        assert config.api_key == "sk-fallback"
        assert config.base_url == "https://llm.example.com/v1"
        assert config.agent_model == "gpt-4o"
        assert config.icon_model == "qwen-plus"

    def test_to_dict_hides_key(self):
        data = LLMConfig(api_key="sk-secret").to_dict()
        assert "sk-secret" not in str(data)
        assert data["api_key_set"] is True


class TestAgentConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("AICONIC_MAX_ROUNDS", raising=False)
        monkeypatch.delenv("AICONIC_ICON_SET_STYLES", raising=False)

        config = AgentConfig.from_env()

        assert config.max_rounds == 5
        assert config.icon_set_styles == DEFAULT_ICON_SET_STYLES
        assert config.icon_temperature == 0.6
        assert config.analysis_max_tokens == 200

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("AICONIC_MAX_ROUNDS", "3")
        monkeypatch.setenv("AICONIC_ICON_SET_STYLES", "neon, retro,,clay")

        config = AgentConfig.from_env()

        assert config.max_rounds == 3
        assert config.icon_set_styles == ["neon", "retro", "clay"]

    def test_invalid_numbers_fall_back(self, monkeypatch):
        monkeypatch.setenv("AICONIC_MAX_ROUNDS", "many")
        monkeypatch.setenv("AICONIC_DB_TIMEOUT_SECONDS", "soon")

        config = AgentConfig.from_env()

        assert config.max_rounds == 5
        assert config.db_timeout_seconds == 10.0

    def test_rounds_at_least_one(self, monkeypatch):
        monkeypatch.setenv("AICONIC_MAX_ROUNDS", "0")
        assert AgentConfig.from_env().max_rounds == 1
