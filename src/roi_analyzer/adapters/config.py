# src/roi_analyzer/adapters/config.py
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

StoreBackend = Literal["memory", "file", "sql"]


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # -----------------------------
    # Scenario persistence
    # -----------------------------
    STORE_BACKEND: StoreBackend = Field(default="file")
    STORE_PATH: str = Field(default="data/scenarios.json")
    DB_URI: str = Field(default="sqlite:///roi_analyzer.db")

    # single well-known key holding the whole scenario collection
    SCENARIOS_KEY: str = Field(default="roi_analyzer.scenarios")

    # Optional size cap for the in-memory backend (mimics browser storage quota)
    STORE_MAX_BYTES: int | None = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="ROI_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("STORE_BACKEND", mode="before")
    @classmethod
    def _backend_lower(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _level_upper(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("STORE_MAX_BYTES", mode="before")
    @classmethod
    def _max_bytes_positive(cls, v: Any) -> Any:
        if v in (None, ""):
            return None
        n = int(v)
        if n <= 0:
            raise ValueError("STORE_MAX_BYTES must be > 0")
        return n


config = AppConfig()
