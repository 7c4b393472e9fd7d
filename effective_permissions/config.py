"""
Settings for the effective-permissions tools, read from EFFPERM_* env vars or .env.
"""
from __future__ import annotations
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EFFPERM_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="warning", description="stdlib level name")
    log_json: bool = Field(default=False, description="Emit JSON log lines")
    color: Literal["auto", "always", "never"] = "auto"
    output: Optional[str] = Field(default=None, description="Also write the report to this file")
    recursive: bool = True


def get_settings(**overrides) -> Settings:
    return Settings(**overrides)
