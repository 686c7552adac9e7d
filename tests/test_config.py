import pytest

from news_digest.config import AppConfig, ProviderConfig, get_api_key, load_config


def test_defaults_match_built_in_sources():
    cfg = load_config(None)

    assert [s.name for s in cfg.sources] == ["36kr", "geekpark", "cyzone"]
    assert cfg.summary.timeout_seconds == 10.0
    assert cfg.summary.retries == 1
    assert cfg.summary.on_provider_failure == "fallback"
    assert cfg.normalizer.max_chars == 200
    assert cfg.fetch.entries_per_source == 5


def test_load_config_merges_sections_and_keeps_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "summary:\n"
        "  retries: 3\n"
        "  on_provider_failure: \"null\"\n"
        "normalizer:\n"
        "  leakage_keywords: [\"禁词\"]\n"
        "sources:\n"
        "  - name: hn\n"
        "    url: https://news.ycombinator.com/rss\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.summary.retries == 3
    assert cfg.summary.on_provider_failure == "null"
    assert cfg.summary.timeout_seconds == 10.0
    assert cfg.normalizer.leakage_keywords == ["禁词"]
    assert cfg.normalizer.max_chars == 200
    assert [(s.name, s.url) for s in cfg.sources] == [("hn", "https://news.ycombinator.com/rss")]
    assert cfg.provider.model == ProviderConfig().model


def test_sources_accept_name_to_url_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "sources:\n  one: https://one.example.com/rss\n  two: https://two.example.com/rss\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert [s.name for s in cfg.sources] == ["one", "two"]
    assert cfg.sources[1].extra_fields == ()


def test_sources_require_name_and_url(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("sources:\n  - name: broken\n", encoding="utf-8")

    with pytest.raises(ValueError, match="name and url"):
        load_config(str(path))


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path)) == AppConfig()


def test_get_api_key_precedence(monkeypatch):
    monkeypatch.setenv("SILICONFLOW_API_KEY", "from-default-env")
    monkeypatch.setenv("CUSTOM_KEY", "from-custom-env")

    assert get_api_key(ProviderConfig()) == "from-default-env"
    assert get_api_key(ProviderConfig(api_key_env="CUSTOM_KEY")) == "from-custom-env"
    assert get_api_key(ProviderConfig(api_key="inline", api_key_env="CUSTOM_KEY")) == "inline"


def test_get_api_key_missing(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert get_api_key(ProviderConfig(name="openai")) is None
