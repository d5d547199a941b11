"""Settings loader with layered JSON files and environment overrides."""

import json
import os
from pathlib import Path
from typing import Any

from itinerary_pipeline.commons.settings.models import Settings


class SettingsLoader:
    """Loads and merges configuration from multiple sources.

    Configuration precedence (highest to lowest):
    1. Environment variables (``ITINERARY__SECTION__KEY``)
    2. Environment-specific config (appsettings.{env}.json)
    3. Base config (appsettings.json)
    """

    ENV_PREFIX = "ITINERARY__"

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory containing configuration files.
                Defaults to 'config' in the current working directory.
            environment: Environment name (dev, staging, prod).
                Defaults to ITINERARY__APP__ENVIRONMENT or 'dev'.
        """
        self.config_dir = config_dir or Path("config")
        self.environment = environment or os.getenv(
            "ITINERARY__APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Load settings with proper precedence."""
        config = self._load_json("appsettings.json")
        config = _deep_merge(
            config, self._load_json(f"appsettings.{self.environment}.json")
        )
        config = _deep_merge(config, self._load_env_vars())
        return Settings(**config)

    def _load_env_vars(self) -> dict[str, Any]:
        """Turn ITINERARY__A__B=value into {"a": {"b": value}}."""
        result: dict[str, Any] = {}
        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue

            *parents, leaf = key[len(self.ENV_PREFIX) :].lower().split("__")
            current = result
            for part in parents:
                current = current.setdefault(part, {})
            current[leaf] = _coerce_value(value)
        return result

    def _load_json(self, filename: str) -> dict[str, Any]:
        path = self.config_dir / filename
        if not path.exists():
            return {}
        with path.open(encoding="utf-8") as f:
            return dict(json.load(f))


def _coerce_value(value: str) -> Any:
    """Coerce an environment string to bool, int, float or JSON when it fits."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            pass

    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or create the global settings instance."""
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        loader = SettingsLoader(config_dir=config_dir, environment=environment)
        _settings = loader.load()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance. Useful for testing."""
    global _settings  # noqa: PLW0603
    _settings = None
