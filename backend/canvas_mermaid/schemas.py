from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from canvas_mermaid.compiler.types import ConversionSettings
from canvas_mermaid.config import default_settings


class SettingsModel(BaseModel):
    """Per-request overrides; unset fields fall back to the environment defaults"""
    direction: Optional[str] = None
    enable_styling: Optional[bool] = None
    enable_internal_links: Optional[bool] = None

    @field_validator("direction")
    @classmethod
    def check_direction(cls, value):
        if value is not None:
            ConversionSettings(direction=value)
        return value

    def to_settings(self) -> ConversionSettings:
        base = default_settings()
        return ConversionSettings(
            direction=self.direction or base.direction,
            enable_styling=base.enable_styling if self.enable_styling is None else self.enable_styling,
            enable_internal_links=(
                base.enable_internal_links
                if self.enable_internal_links is None
                else self.enable_internal_links
            ),
        )


class ConvertRequest(BaseModel):
    name: str                               # e.g. "Flow.canvas"
    canvas: Dict[str, Any]
    settings: SettingsModel = Field(default_factory=SettingsModel)


class PatchRequest(ConvertRequest):
    document: str = ""


class RefreshRequest(BaseModel):
    canvas_path: str                        # relative to VAULT_ROOT
    name: Optional[str] = None
    settings: SettingsModel = Field(default_factory=SettingsModel)
