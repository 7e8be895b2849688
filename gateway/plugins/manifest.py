"""Plugin manifest model - describes a plugin's name, options and policies."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

OPTION_TYPES = ("string", "number", "boolean")


class OptionSchema(BaseModel):
    """Schema of a single configurable plugin option."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Option type: string | number | boolean")
    title: Optional[str] = Field(default=None, description="Display label for prompts")
    required: bool = Field(default=False, description="Reject empty answers")

    @property
    def is_supported(self) -> bool:
        return self.type in OPTION_TYPES


class PluginManifest(BaseModel):
    """Plugin manifest loaded from the installed package."""

    model_config = ConfigDict(frozen=True)

    package: str = Field(..., description="Install identifier passed to the package manager")
    name: Optional[str] = Field(
        default=None,
        description="Plugin name used as the key in system config; defaults to the package",
    )
    version: str = Field(default="0.0.0", description="Plugin version")
    description: str = Field(default="", description="Plugin description")
    options: Dict[str, OptionSchema] = Field(
        default_factory=dict,
        description="Configurable options, prompted for in declaration order",
    )
    policies: List[str] = Field(
        default_factory=list,
        description="Policy names the plugin contributes to the gateway",
    )

    @property
    def plugin_name(self) -> str:
        return self.name or self.package
