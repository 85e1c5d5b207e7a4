"""Booker configuration loaded from environment variables.

The configuration object is built once at process start (see ``load_config``)
and passed down explicitly; no module below the CLI reads the environment.
"""

import json
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsError

from arena_booker.errors import ConfigurationError
from arena_booker.models import ActivityRule


class SiteSettings(BaseSettings):
    """Site, browser and logging settings, without the activity map.

    Loading this class never touches ARENA_ACTIVITIES, so an activity map
    supplied from a file replaces the environment's instead of merging with it.
    """

    # Arena Alicante site
    arena_url: str = Field(
        default="https://arenaalicante.provis.es",
        description="Base URL of the booking site",
    )
    arena_user: str = Field(
        default="",
        description="Username for the site's login form",
    )
    arena_password: str = Field(
        default="",
        description="Password for the site's login form",
    )

    run_activities: str = Field(
        default="",
        description="Comma-separated activity names to run (empty = all)",
    )

    # Browser
    headless: bool = Field(
        default=True,
        description="Run Chromium without a visible window",
    )
    timeout_ms: int = Field(
        default=30000,
        gt=0,
        description="Default Playwright timeout for actions and navigation",
    )
    login_settle_ms: int = Field(
        default=3000,
        ge=0,
        description="Pause after submitting the login form",
    )
    block_resources: bool = Field(
        default=True,
        description="Abort image, font and media requests",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for cron/CI)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("arena_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def run_filter(self) -> list[str]:
        """Lower-cased activity names from RUN_ACTIVITIES, blanks dropped."""
        return [
            name.strip().lower()
            for name in self.run_activities.split(",")
            if name.strip()
        ]

    def require_credentials(self) -> None:
        """Fail before any network activity when credentials are missing.

        Raises:
            ConfigurationError: If ARENA_USER or ARENA_PASSWORD is empty.
        """
        missing = [
            name
            for name, value in (
                ("ARENA_USER", self.arena_user),
                ("ARENA_PASSWORD", self.arena_password),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing credentials: define {' and '.join(missing)} in the environment or .env"
            )


class BookerConfig(SiteSettings):
    """Booker configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    arena_activities: dict[str, ActivityRule] = Field(
        description="JSON object mapping activity name to its booking rule",
    )

    @field_validator("arena_activities")
    @classmethod
    def _require_activities(
        cls, value: dict[str, ActivityRule]
    ) -> dict[str, ActivityRule]:
        if not value:
            raise ValueError("at least one activity must be configured")
        return value


def read_activities_file(path: str | Path) -> dict:
    """Read an activity map from a JSON file.

    Raises:
        ConfigurationError: If the file is missing or not a JSON object.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read activities file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Activities file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Activities file {path} must contain a JSON object")
    return data


def _build(overrides: dict) -> BookerConfig:
    activities = overrides.pop("arena_activities", None)
    if activities is None:
        return BookerConfig(**overrides)
    # An explicit map replaces ARENA_ACTIVITIES; model_validate skips the env sources
    site = SiteSettings(**overrides)
    return BookerConfig.model_validate(
        {**site.model_dump(), "arena_activities": activities}
    )


def load_config(**overrides) -> BookerConfig:
    """Build the configuration from environment, .env and explicit overrides.

    An ``arena_activities`` override replaces ARENA_ACTIVITIES entirely; the
    environment value is then neither merged in nor parsed.

    Args:
        **overrides: Field values that take precedence over the environment
            (e.g. values from CLI flags).

    Returns:
        BookerConfig: Validated configuration.

    Raises:
        ConfigurationError: If any setting is missing or malformed.
    """
    try:
        return _build(dict(overrides))
    except SettingsError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e
