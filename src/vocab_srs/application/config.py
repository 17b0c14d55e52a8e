from datetime import tzinfo
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from vocab_srs.application.utils.timestamps import resolve_timezone
from vocab_srs.domain.constants import (
    DEFAULT_REVIEW_HOUR,
    DEFAULT_REVIEW_MINUTE,
    DEFAULT_WEIGHTS,
    EXPECTED_RESPONSE_MS,
    HISTORY_LIMIT,
    MAX_BATCH_SIZE,
    MAX_INTERVAL_MINUTES,
    MIN_BATCH_SIZE,
    MIN_INTERVAL_MINUTES,
    REQUEST_RETENTION,
    SECONDS_PER_CARD,
)


def config_file_candidates() -> list[Path]:
    return [
        Path.home() / ".config/vocab-srs/config.toml",
        Path.home() / ".vocab-srs.toml",
    ]


class SchedulerSettings(BaseSettings):
    """
    Immutable scheduler configuration.
    Supports loading from:
    1. Environment variables (VOCAB_SRS_*)
    2. Config file (~/.config/vocab-srs/config.toml)
    3. Explicit keyword arguments (CLI overrides, tests)

    A Scheduler is constructed with one of these; there is no module-level
    instance.
    """

    model_config = SettingsConfigDict(
        env_prefix="VOCAB_SRS_",
        extra="ignore",
        frozen=True,
    )

    # Algorithm selection
    use_advanced: bool = False
    timezone: str = "UTC"

    # Interval limits (adaptive algorithm, minutes)
    minimum_interval: int = Field(default=MIN_INTERVAL_MINUTES, ge=1)
    maximum_interval: int = Field(default=MAX_INTERVAL_MINUTES, ge=1)
    history_limit: int = Field(default=HISTORY_LIMIT, ge=1)

    # Carried for compatibility with stored configs; unused by the formulas
    request_retention: float = REQUEST_RETENTION
    weights: tuple[float, ...] = DEFAULT_WEIGHTS

    # Optimal review time fallback
    default_review_hour: int = Field(default=DEFAULT_REVIEW_HOUR, ge=0, le=23)
    default_review_minute: int = Field(default=DEFAULT_REVIEW_MINUTE, ge=0, le=59)

    # Response time analysis
    expected_response_ms: dict[str, int] = Field(
        default_factory=lambda: dict(EXPECTED_RESPONSE_MS)
    )

    # Adaptive factor
    default_accuracy: float = 0.8
    high_accuracy_threshold: float = 0.9
    low_accuracy_threshold: float = 0.7
    strong_factor: float = 1.2
    weak_factor: float = 0.8
    streak_step: float = 0.01
    streak_bonus_cap: float = 0.2

    # Learning insights
    timing_insight_margin: float = 0.1
    failure_rate_threshold: float = 0.3
    streak_insight_days: int = 7

    # Session sizing
    seconds_per_card: int = Field(default=SECONDS_PER_CARD, ge=1)
    min_batch_size: int = MIN_BATCH_SIZE
    max_batch_size: int = MAX_BATCH_SIZE
    batch_accuracy_floor: float = 0.5

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
        for f in config_file_candidates():
            if f.exists():
                toml_file = f
                break

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        else:
            return (
                init_settings,
                env_settings,
            )

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        resolve_timezone(v)
        return v

    @field_validator("maximum_interval")
    @classmethod
    def check_interval_bounds(cls, v: int, info: Any) -> int:
        minimum = info.data.get("minimum_interval", MIN_INTERVAL_MINUTES)
        if v < minimum:
            raise ValueError("maximum_interval must not be below minimum_interval")
        return v

    @property
    def tzinfo(self) -> tzinfo:
        return resolve_timezone(self.timezone)


def resolve_config(overrides: dict[str, Any] | None = None) -> SchedulerSettings:
    """
    Multi-layered configuration resolution.
    1. Defaults in SchedulerSettings
    2. ~/.config/vocab-srs/config.toml (if exists)
    3. Environment variables (VOCAB_SRS_*)
    4. overrides (passed from Typer); None values are ignored
    """
    return SchedulerSettings(**{k: v for k, v in (overrides or {}).items() if v is not None})
