"""Configuration management using pydantic-settings."""

import tomllib
from pathlib import Path
from typing import Self

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.models import ACTIVE_STATE
from .domain.window import DEFAULT_YEARS_BACK, DEFAULT_YEARS_FORWARD

DEFAULT_STORE = "~/.local/share/fiscaltrail/data.yaml"
CONFIG_PATH = Path("~/.config/fiscaltrail/config.toml").expanduser()


class StoreConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FISCALTRAIL_STORE_")

    path: Path = Path(DEFAULT_STORE)

    @field_validator("path", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser()


class WindowConfig(BaseSettings):
    """Historical window size in years around today."""

    model_config = SettingsConfigDict(env_prefix="FISCALTRAIL_WINDOW_")

    years_back: int = DEFAULT_YEARS_BACK
    years_forward: int = DEFAULT_YEARS_FORWARD

    @field_validator("years_back")
    @classmethod
    def check_years_back(cls, v: int) -> int:
        if v < 1:
            raise ValueError("years_back must be at least 1")
        return v

    @field_validator("years_forward")
    @classmethod
    def check_years_forward(cls, v: int) -> int:
        if v < 0:
            raise ValueError("years_forward must not be negative")
        return v


class ReconstructionConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FISCALTRAIL_RECONSTRUCTION_")

    active_state: str = ACTIVE_STATE


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FISCALTRAIL_")

    store: StoreConfig = StoreConfig()
    window: WindowConfig = WindowConfig()
    reconstruction: ReconstructionConfig = ReconstructionConfig()

    @model_validator(mode="after")
    def ensure_dirs(self) -> Self:
        self.store.path.parent.mkdir(parents=True, exist_ok=True)
        return self


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from TOML file, falling back to defaults."""
    path = config_path or CONFIG_PATH

    if path.exists():
        with open(path, "rb") as f:
            data = tomllib.load(f)

        store = StoreConfig(**data.get("store", {}))
        window = WindowConfig(**data.get("window", {}))
        reconstruction = ReconstructionConfig(**data.get("reconstruction", {}))
        return Settings(store=store, window=window, reconstruction=reconstruction)

    return Settings()
