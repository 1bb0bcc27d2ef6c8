from pathlib import Path

from src.aigateway.config import DEFAULT_FALLBACK_MODEL, DEFAULT_MODEL, load_config

def _write_yaml(root: Path, text: str) -> Path:
    p = root / "src" / "configs" / "gateway.yaml"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p

def test_defaults_without_yaml(tmp_path):
    cfg = load_config(project_root=tmp_path, environ={})
    assert cfg.provider == "openrouter"
    assert cfg.model == DEFAULT_MODEL
    assert cfg.fallback_model == DEFAULT_FALLBACK_MODEL
    assert cfg.timeout_ms == 25_000
    assert cfg.max_body_chars == 250_000
    assert cfg.default_temperature == 0.2
    assert cfg.rate_window_ms == 60_000
    assert cfg.rate_max_requests == 40
    assert cfg.providers["openai"].endpoint == "https://api.openai.com/v1/chat/completions"

def test_shipped_yaml_matches_defaults():
    cfg = load_config(environ={})
    assert cfg.timeout_ms == 25_000
    assert cfg.max_body_chars == 250_000
    assert cfg.raw_result_max_chars == 50_000
    assert cfg.rate_max_requests == 40
    assert cfg.providers["openrouter"].base_url == "https://openrouter.ai/api/v1"

def test_yaml_overrides(tmp_path):
    _write_yaml(tmp_path, """
timeout_ms: 5000
max_body_chars: 100
rate_limit:
  window_ms: 1000
  max_requests: 3
providers:
  openai:
    base_url: http://localhost:8000/v1/
""")
    cfg = load_config(project_root=tmp_path, environ={})
    assert cfg.timeout_ms == 5000
    assert cfg.max_body_chars == 100
    assert cfg.rate_window_ms == 1000
    assert cfg.rate_max_requests == 3
    assert cfg.providers["openai"].endpoint == "http://localhost:8000/v1/chat/completions"
    assert cfg.providers["openai"].api_key_env == "OPENAI_API_KEY"

def test_env_overrides_yaml(tmp_path):
    _write_yaml(tmp_path, "timeout_ms: 5000\n")
    env = {
        "AI_PROVIDER": " OpenAI ",
        "MODEL_TEXT": "gpt-4o-mini",
        "MODEL_TEXT_FALLBACK": "gpt-4o",
        "AI_TIMEOUT_MS": "9000",
        "OPENAI_BASE_URL": "https://proxy.example/v1",
    }
    cfg = load_config(project_root=tmp_path, environ=env)
    assert cfg.provider == "openai"
    assert cfg.model == "gpt-4o-mini"
    assert cfg.fallback_model == "gpt-4o"
    assert cfg.timeout_ms == 9000
    assert cfg.providers["openai"].endpoint == "https://proxy.example/v1/chat/completions"

def test_config_path_override(tmp_path):
    p = tmp_path / "custom.yaml"
    p.write_text("max_body_chars: 42\n", encoding="utf-8")
    cfg = load_config(project_root=tmp_path / "nowhere", environ={"AIGATEWAY_CONFIG": str(p)})
    assert cfg.max_body_chars == 42

def test_broken_yaml_falls_back_to_defaults(tmp_path):
    _write_yaml(tmp_path, "timeout_ms: [unclosed\n")
    cfg = load_config(project_root=tmp_path, environ={})
    assert cfg.timeout_ms == 25_000

def test_bad_values_keep_defaults(tmp_path):
    _write_yaml(tmp_path, "timeout_ms: soon\nrate_limit: 7\n")
    cfg = load_config(project_root=tmp_path, environ={"AI_TIMEOUT_MS": "later"})
    assert cfg.timeout_ms == 25_000
    assert cfg.rate_max_requests == 40
