from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

REGION_STRATEGIES = {"deterministic", "title"}
TITLE_COLUMN_MODES = {"position", "rank"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_env: str = "dev"
    log_level: str = "info"
    log_dir: str = "logs"
    report_template: str = "network_kpi"
    template_dir: str | None = None
    region_strategy: str = "deterministic"
    title_column_mode: str = "position"
    alias_prefix: str = "ALIAS"
    max_upload_mb: int = 20

    @field_validator("region_strategy")
    @classmethod
    def _check_region_strategy(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in REGION_STRATEGIES:
            raise ValueError(f"REGION_STRATEGY must be one of {sorted(REGION_STRATEGIES)}, got {value!r}")
        return value

    @field_validator("title_column_mode")
    @classmethod
    def _check_title_column_mode(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in TITLE_COLUMN_MODES:
            raise ValueError(f"TITLE_COLUMN_MODE must be one of {sorted(TITLE_COLUMN_MODES)}, got {value!r}")
        return value

    @field_validator("alias_prefix")
    @classmethod
    def _uppercase_prefix(cls, value: str) -> str:
        """Aliases are compared against upper-cased base codes."""

        value = value.strip().upper()
        if not value:
            raise ValueError("ALIAS_PREFIX cannot be empty")
        return value


settings = Settings()
