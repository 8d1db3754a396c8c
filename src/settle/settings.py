"""Settings for the resolution engine itself.

Values are read, in increasing precedence, from field defaults and ``SETTLE_*``
environment variables (for example ``SETTLE_AMBIGUITY_POLICY=keep_previous``).
"""

import logging
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from settle.disambiguation import AmbiguityPolicy

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EngineSettings(BaseSettings):
    """Configuration of an :class:`~settle.engine.Engine`."""

    model_config = SettingsConfigDict(
        env_prefix="SETTLE_",
        case_sensitive=False,
        extra="ignore",
    )

    ambiguity_policy: AmbiguityPolicy = Field(
        default=AmbiguityPolicy.DISCARD,
        description="What to keep when a tie between two values cannot be broken",
    )
    ambiguity_log_level: LogLevel = Field(
        default="DEBUG",
        description="Level at which ambiguous values are logged",
    )
    cache_enabled: bool = Field(
        default=True,
        description="Memoise resolutions per (qualifiers, path); when off every lookup resolves afresh",
    )
    env_prefix: str = Field(
        default="",
        description="Prefix prepended to names looked up by the environment variable provider",
    )
    env_uppercase: bool = Field(
        default=True,
        description="Upper-case names looked up by the environment variable provider",
    )
    qualifier_env_prefix: str = Field(
        default="SETTLE_QUALIFIER_",
        description="Prefix of environment variables supplying the engine's own qualifiers",
    )

    @property
    def ambiguity_log_level_number(self) -> int:
        return logging.getLevelName(self.ambiguity_log_level)
