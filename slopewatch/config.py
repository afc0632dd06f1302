"""Configuration management for the SlopeWatch service."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv


@dataclass
class SourcesConfig:
    """Upstream data source configuration."""

    weather_url: str = "https://api.open-meteo.com/v1/forecast"
    soil_url: str = "https://rest.isric.org/soilgrids/v2.0/properties/query"
    elevation_url: str = "https://api.open-meteo.com/v1/elevation"
    timeout: float = 10.0


@dataclass
class ServerConfig:
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class RiskModelConfig:
    """Risk model configuration."""

    model_path: str | None = None  # YAML overrides for DEFAULT_MODEL


@dataclass
class Config:
    """Main configuration container."""

    sources: SourcesConfig = field(default_factory=SourcesConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    risk: RiskModelConfig = field(default_factory=RiskModelConfig)

    @classmethod
    def load(cls, config_dir: Path | None = None) -> "Config":
        """Load configuration from files and environment variables."""
        # Load .env file if present
        env_file = Path(__file__).parent.parent / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        config = cls()

        if config_dir and config_dir.exists():
            service_file = config_dir / "service.yaml"
            if service_file.exists():
                config._load_yaml(service_file)

        # Override with environment variables
        config._load_from_env()

        return config

    def _load_yaml(self, path: Path) -> None:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._apply_yaml_config(data)

    def _apply_yaml_config(self, data: dict[str, Any]) -> None:
        """Apply YAML configuration data."""
        if "sources" in data:
            sources = data["sources"]
            if "weather_url" in sources:
                self.sources.weather_url = sources["weather_url"]
            if "soil_url" in sources:
                self.sources.soil_url = sources["soil_url"]
            if "elevation_url" in sources:
                self.sources.elevation_url = sources["elevation_url"]
            if "timeout" in sources:
                self.sources.timeout = float(sources["timeout"])

        if "server" in data:
            server = data["server"]
            if "host" in server:
                self.server.host = server["host"]
            if "port" in server:
                self.server.port = int(server["port"])
            if "cors_origins" in server:
                self.server.cors_origins = list(server["cors_origins"])

        if "risk_model" in data:
            risk = data["risk_model"]
            if "model_path" in risk:
                self.risk.model_path = risk["model_path"]

    def _load_from_env(self) -> None:
        """Override configuration from environment variables."""
        # Sources
        if url := os.getenv("WEATHER_API_URL"):
            self.sources.weather_url = url
        if url := os.getenv("SOIL_API_URL"):
            self.sources.soil_url = url
        if url := os.getenv("ELEVATION_API_URL"):
            self.sources.elevation_url = url
        if timeout := os.getenv("SOURCE_TIMEOUT"):
            self.sources.timeout = float(timeout)

        # Server
        if host := os.getenv("HOST"):
            self.server.host = host
        if port := os.getenv("PORT"):
            self.server.port = int(port)
        if origins := os.getenv("CORS_ORIGINS"):
            self.server.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]

        # Risk model
        if model_path := os.getenv("RISK_MODEL_PATH"):
            self.risk.model_path = model_path


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        config_dir = Path(__file__).parent.parent / "config"
        _config = Config.load(config_dir)
    return _config


def reload_config(config_dir: Path | None = None) -> Config:
    """Reload configuration (useful for testing)."""
    global _config
    _config = Config.load(config_dir)
    return _config
