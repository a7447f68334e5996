"""Configuration for Daybook."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from daybook.store.models import AreaDeletePolicy


class Config(BaseSettings):
    """Application configuration, overridable with DAYBOOK_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="DAYBOOK_")

    state_file: Path = Field(default_factory=lambda: Path.home() / ".daybook" / "state.json")
    seed_sample_data: bool = Field(default=True)
    watch_state_file: bool = Field(default=True)
    area_delete_policy: AreaDeletePolicy = Field(default=AreaDeletePolicy.KEEP)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)
    log_level: str = Field(default="info")
