"""
Configuration management using Pydantic Settings
"""
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FormType(str, Enum):
    """Bootstrap 3 form layouts"""
    VERTICAL = "form-vertical"
    INLINE = "form-inline"
    HORIZONTAL = "form-horizontal"


class Settings(BaseSettings):
    """Framework defaults for rendered forms"""

    # Layout
    type: str = Field(default=FormType.VERTICAL.value, description="Default form type class")
    left_column_class: str = Field(default="col-sm-2 col-md-3", description="Label column of horizontal forms")
    left_column_offset_class: str = Field(
        default="col-sm-offset-2 col-md-offset-3",
        description="Offset for label-less controls of horizontal forms"
    )
    right_column_class: str = Field(default="col-sm-10 col-md-9", description="Control column of horizontal forms")
    icon_prefix: str = Field(default="glyphicon glyphicon-", description="Prefix for addon icon classes")

    # Validation errors
    error_class: str = Field(default="has-error", description="Form group class for fields with errors")
    error_bag: Optional[str] = Field(default=None, description="Named error bag to read messages from")
    show_all_errors: bool = Field(default=False, description="Show every message instead of the first")

    # Dynamic select widget
    app_url: str = Field(default="", description="Prefix for guessed list-route URLs")
    asset_url: str = Field(default="", description="Prefix for widget script and style assets")

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v):
        """Accept FormType members and bare names like 'horizontal'"""
        if isinstance(v, FormType):
            return v.value
        if isinstance(v, str) and v and not v.startswith("form-"):
            return f"form-{v}"
        return v

    @field_validator("app_url", "asset_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def asset(self, path: str) -> str:
        """Absolute URL of a bundled widget asset"""
        return f"{self.asset_url}/{path.lstrip('/')}"

    model_config = SettingsConfigDict(
        env_prefix="BOOTSTRAP_FORM_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
