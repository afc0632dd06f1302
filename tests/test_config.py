"""Tests for configuration loading."""

from slopewatch.config import Config, get_config, reload_config


class TestConfigLoad:
    """Tests for Config.load."""

    def test_defaults(self, monkeypatch):
        for var in ("PORT", "HOST", "CORS_ORIGINS", "WEATHER_API_URL", "SOURCE_TIMEOUT", "RISK_MODEL_PATH"):
            monkeypatch.delenv(var, raising=False)

        config = Config.load()

        assert config.sources.weather_url == "https://api.open-meteo.com/v1/forecast"
        assert config.sources.timeout == 10.0
        assert config.server.port == 5000
        assert config.server.cors_origins == ["*"]
        assert config.risk.model_path is None

    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("SOURCE_TIMEOUT", raising=False)
        (tmp_path / "service.yaml").write_text(
            "sources:\n"
            "  timeout: 3\n"
            "  soil_url: https://soil.example/query\n"
            "server:\n"
            "  port: 8080\n"
            "  cors_origins: [https://map.example]\n"
            "risk_model:\n"
            "  model_path: /etc/slopewatch/model.yaml\n"
        )

        config = Config.load(tmp_path)

        assert config.sources.timeout == 3.0
        assert config.sources.soil_url == "https://soil.example/query"
        assert config.server.port == 8080
        assert config.server.cors_origins == ["https://map.example"]
        assert config.risk.model_path == "/etc/slopewatch/model.yaml"

    def test_environment_overrides_yaml(self, tmp_path, monkeypatch):
        (tmp_path / "service.yaml").write_text("server:\n  port: 8080\n")
        monkeypatch.setenv("PORT", "9090")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
        monkeypatch.setenv("ELEVATION_API_URL", "https://elevation.example")

        config = Config.load(tmp_path)

        assert config.server.port == 9090
        assert config.server.cors_origins == ["https://a.example", "https://b.example"]
        assert config.sources.elevation_url == "https://elevation.example"

    def test_empty_yaml_is_ignored(self, tmp_path):
        (tmp_path / "service.yaml").write_text("")
        assert Config.load(tmp_path).sources.soil_url.startswith("https://rest.isric.org")


class TestGlobalConfig:
    """Tests for get_config / reload_config."""

    def test_reload_replaces_global(self, tmp_path, monkeypatch, restore_config):
        monkeypatch.delenv("SOURCE_TIMEOUT", raising=False)
        (tmp_path / "service.yaml").write_text("sources:\n  timeout: 1.5\n")

        reloaded = reload_config(tmp_path)

        assert get_config() is reloaded
        assert get_config().sources.timeout == 1.5
