from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from ladder.application.scheduler import validate_intervals
from ladder.domain.constants import (
    DEFAULT_DAILY_REVIEW_LIMIT,
    DEFAULT_INTERVALS,
    DEFAULT_REVIEW_ORDER,
)
from ladder.domain.errors import InvalidInput

CONFIG_FILES = [
    Path.home() / ".config/ladder/config.toml",
    Path.home() / ".ladder.toml",
]


class AppConfig(BaseSettings):
    """
    Configuration model for ladder.
    Supports loading from:
    1. Config file (~/.config/ladder/config.toml or ~/.ladder.toml)
    2. Environment variables (LADDER_*)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="LADDER_",
        toml_file=CONFIG_FILES,
        extra="ignore",
    )

    # Storage
    backend: Literal["memory", "sqlite"] = "sqlite"
    db_path: Path = Field(default_factory=lambda: Path.home() / ".config/ladder/ladder.db")

    # Scheduling
    intervals: list[int] = Field(default_factory=lambda: list(DEFAULT_INTERVALS))

    # Sessions
    daily_review_limit: int = DEFAULT_DAILY_REVIEW_LIMIT
    review_order: Literal["oldest_first", "random"] = DEFAULT_REVIEW_ORDER

    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file
        toml_file = None
        for f in CONFIG_FILES:
            if f.exists():
                toml_file = f
                break

        # Earlier sources win: CLI overrides > env > TOML
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("db_path", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path:
        return Path(v).expanduser()

    @field_validator("intervals")
    @classmethod
    def check_intervals(cls, v: list[int]) -> list[int]:
        try:
            return list(validate_intervals(v))
        except InvalidInput as e:
            raise ValueError(str(e)) from e


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/ladder/config.toml (if exists)
    3. Environment variables (LADDER_*)
    4. cli_overrides (passed from Typer)
    """
    # Typer passes None for options the user did not set.
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
