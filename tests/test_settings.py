"""Config loading: defaults, profile overlay, env overrides."""

from matchfeed.config import get_settings
from matchfeed.config.settings import PLACEHOLDER_LIVE_STATS_TOKEN, Settings, load_config


def test_defaults_without_config():
    s = Settings()
    assert s.batch_size == 5
    assert s.max_concurrency == 45
    assert s.half_time_status == 2
    assert s.main_market_type == 4
    assert s.events_ttl_sec == 0
    assert s.live_stats_fallback_token == PLACEHOLDER_LIVE_STATS_TOKEN


def test_profile_overlay_deep_merges(tmp_path):
    (tmp_path / "default.toml").write_text(
        '[cache]\nmarket_config_ttl_sec = 600\npercentages_ttl_sec = 30\n[logging]\nlevel = "INFO"\n'
    )
    (tmp_path / "dev.toml").write_text("[cache]\npercentages_ttl_sec = 5\n")
    raw = load_config("dev", tmp_path)
    assert raw["cache"] == {"market_config_ttl_sec": 600, "percentages_ttl_sec": 5}
    s = get_settings("dev", tmp_path)
    assert s.percentages_ttl_sec == 5
    assert s.logging_level == "INFO"


def test_missing_config_dir_gives_defaults(tmp_path):
    assert load_config(None, tmp_path) == {}


def test_env_overrides_credentials_and_token(monkeypatch):
    s = Settings(auth={"username": "a", "password": "b"}, live_stats={"token": "cfg"})
    monkeypatch.setenv("MATCHFEED_BASIC_AUTH_USER", "env-user")
    monkeypatch.setenv("MATCHFEED_LIVE_STATS_TOKEN", "env-token")
    assert s.auth_username == "env-user"
    assert s.auth_password == "b"
    assert s.live_stats_token == "env-token"
