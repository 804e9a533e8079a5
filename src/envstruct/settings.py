"""
envstruct's own settings, loaded with pydantic-settings.

Environment variables:
- ENVSTRUCT_POLICY: 'permissive' or 'strict'
- ENVSTRUCT_JOIN_KEYS: namespace keys under group prefixes
- ENVSTRUCT_SEPARATOR: separator used when joining keys
- ENVSTRUCT_TAG: metadata key holding variable names
- ENVSTRUCT_LOG_LEVEL: logging level for the CLI
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from envstruct.populator import Populator, PresencePolicy
from envstruct.schema import DEFAULT_TAG


class Settings(BaseSettings):
    """Default populator options."""

    model_config = SettingsConfigDict(
        env_prefix="ENVSTRUCT_",
        extra="ignore",
    )

    policy: PresencePolicy = PresencePolicy.PERMISSIVE
    join_keys: bool = False
    separator: str = "_"
    tag: str = DEFAULT_TAG
    log_level: str = "WARNING"

    def make_populator(self, **overrides) -> Populator:
        """Build a Populator from these settings; None overrides are ignored."""
        options = {
            'policy': self.policy,
            'join_keys': self.join_keys,
            'separator': self.separator,
            'tag': self.tag,
        }
        options.update({k: v for k, v in overrides.items() if v is not None})
        return Populator(**options)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


__all__ = ['Settings', 'get_settings']
