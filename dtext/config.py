from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["DTextOptions", "Config", "load_config"]


class DTextOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    domain: str = ""
    base_url: str = ""
    internal_domains: set[str] = Field(default_factory=set)
    allow_color: bool = True
    f_mentions: bool = True
    f_inline: bool = False
    max_thumbs: int = Field(default=0, ge=0)

    def is_internal_domain(self, domain: str) -> bool:
        return domain.lower() in {d.lower() for d in self.internal_domains}


class Config(BaseSettings):
    """CLI settings; ``DTEXT_DTEXT_OPTIONS__MAX_THUMBS=3`` and the like override options."""

    model_config = SettingsConfigDict(env_prefix="DTEXT_", env_nested_delimiter="__")

    dtext_options: DTextOptions = Field(default_factory=DTextOptions)
    strict_mode: bool = False


def load_config(config_dict: dict[str, Any]) -> Config:
    return Config(**config_dict)
