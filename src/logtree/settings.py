"""
Logging Registry Settings.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Process-level knobs for building logger registries."""

    model_config = SettingsConfigDict(
        env_prefix="LOGTREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    root_name: str = Field(default="root", description="Config section and module name of the root logger")
    default_level: str = Field(default="info", description="Level applied when the root section has none")
    default_writer: Literal["stdout", "stderr"] = Field(
        default="stderr",
        description="Destination applied when the root section has no writer",
    )
    intercept_stdlib: bool = Field(
        default=False,
        description="Route stdlib logging records into the registry on configure_logging()",
    )
