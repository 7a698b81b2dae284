"""Configuration handling.

Settings are read, in order of precedence, from init arguments, `PRUSA_LINK_*` environment variables,
a `.env` file, and `config.json` in the user config directory.

How to use the most important parts:
- `Settings`: The pydantic-settings model. `Settings().build_auth()` returns the matching auth strategy.
- `load_json_config()` / `save_json_config()`: Read and persist `config.json`.
- `settings`: A lazily created module-level `Settings` instance.
"""

import json
import pathlib
import typing
from enum import StrEnum

import platformdirs
import pydantic
import pydantic_settings
import structlog

from prusa.link.client import auth, consts
from prusa.link.client.models import EndpointTarget

logger = structlog.get_logger(consts.APP_NAME)


class OutputFormat(StrEnum):
    """Output formats supported by the CLI."""

    RICH = "rich"
    PLAIN = "plain"
    JSON = "json"


def get_config_path() -> pathlib.Path:
    """Location of `config.json`."""
    config_dir = pathlib.Path(platformdirs.user_config_dir(consts.APP_NAME, consts.APP_AUTHOR))
    return config_dir / "config.json"


def load_json_config() -> dict[str, typing.Any]:
    """Load configuration from config.json."""
    config_file = get_config_path()
    logger.debug("Attempting to load config.json", config_file=config_file)
    if config_file.exists():
        try:
            with config_file.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError):
            # Fallback if JSON is malformed
            logger.exception("Failed to read config.json", config_file=config_file)
            return {}
    logger.debug("No config.json found.")
    return {}


class Settings(pydantic_settings.BaseSettings):
    """Connection settings for a PrusaLink printer."""

    host: str | None = None
    port: int = pydantic.Field(default=consts.DEFAULT_PORT, ge=1, le=65535)

    api_key: pydantic.SecretStr | None = None
    username: str | None = None
    password: pydantic.SecretStr | None = None

    timeout: float = pydantic.Field(default=consts.DEFAULT_TIMEOUT, gt=0)
    connect_timeout: float = pydantic.Field(default=consts.DEFAULT_CONNECT_TIMEOUT, gt=0)
    max_body_size: int = pydantic.Field(default=consts.MAX_BODY_SIZE, ge=0)

    output_format: OutputFormat | None = None

    model_config = pydantic_settings.SettingsConfigDict(env_prefix="PRUSA_LINK_", env_file=".env", extra="ignore")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[pydantic_settings.BaseSettings],
        init_settings: pydantic_settings.PydanticBaseSettingsSource,
        env_settings: pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[pydantic_settings.PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include config.json."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            pydantic_settings.InitSettingsSource(settings_cls, load_json_config()),
            file_secret_settings,
        )

    def build_target(self) -> EndpointTarget:
        """Return the configured printer address.

        Raises:
            ValueError: If no host is configured.
        """
        if not self.host:
            raise ValueError("No printer host configured. Set PRUSA_LINK_HOST or run 'prusalinkctl config set'.")
        return EndpointTarget(host=self.host, port=self.port)

    def build_auth(self) -> auth.AuthStrategy:
        """Return the auth strategy for the configured credentials (API key > Basic > none)."""
        return auth.resolve_auth(api_key=self.api_key, username=self.username, password=self.password)


def save_json_config(current_settings: Settings) -> pathlib.Path:
    """Save the connection settings to config.json.

    Secrets are written only if they were set; existing keys not managed here are preserved.
    """
    config_file = get_config_path()
    config_file.parent.mkdir(parents=True, exist_ok=True)

    save_data = load_json_config()
    if current_settings.host is not None:
        save_data["host"] = current_settings.host
    save_data["port"] = current_settings.port
    save_data["timeout"] = current_settings.timeout
    if current_settings.api_key is not None:
        save_data["api_key"] = current_settings.api_key.get_secret_value()
    if current_settings.username is not None:
        save_data["username"] = current_settings.username
    if current_settings.password is not None:
        save_data["password"] = current_settings.password.get_secret_value()
    if current_settings.output_format is not None:
        save_data["output_format"] = str(current_settings.output_format)

    with config_file.open("w", encoding="utf-8") as f:
        json.dump(save_data, f, indent=4)
    return config_file


if typing.TYPE_CHECKING:
    settings: Settings

_settings: Settings | None = None


def __getattr__(name: str) -> typing.Any:
    """Implement lazy loading for settings to allow logging initialization first."""
    if name == "settings":
        global _settings
        if _settings is None:
            _settings = Settings()
        return _settings
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads every source."""
    global _settings
    _settings = None
