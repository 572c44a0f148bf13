from reportkit.core.config import DEFAULT_CORS_ORIGINS
from reportkit.core.config import Settings


def test_settings_defaults(monkeypatch):
    for var in ("LLM_PROVIDER", "MODEL_ID", "DEFAULT_SAMPLE_SET", "PLUGIN_REPLACE_ON_DUPLICATE", "CORS_ALLOWED_ORIGINS"):
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None)
    assert s.llm_provider == "openai"
    assert s.model_id == "gpt-4o-mini"
    assert s.default_sample_set == "main"
    assert s.plugin_replace_on_duplicate is False
    assert s.plugin_entry_point_group == "reportkit.plugins"
    assert s.cors_allowed_origins == DEFAULT_CORS_ORIGINS


def test_settings_env_override(monkeypatch):
    monkeypatch.setenv("MODEL_ID", "deepseek-chat")
    monkeypatch.setenv("PLUGIN_REPLACE_ON_DUPLICATE", "true")
    s = Settings(_env_file=None)
    assert s.model_id == "deepseek-chat"
    assert s.plugin_replace_on_duplicate is True


def test_cors_origins_from_comma_separated_string():
    s = Settings(_env_file=None, cors_allowed_origins="https://a.example, https://b.example")
    assert s.cors_allowed_origins == ["https://a.example", "https://b.example"]


def test_api_key_for_provider():
    s = Settings(_env_file=None, openrouter_api_key="or-key", openai_api_key=None)
    assert s.api_key_for("openrouter") == "or-key"
    assert s.api_key_for("openai") is None
    assert s.api_key_for("unknown") is None
