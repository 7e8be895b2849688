"""Error kinds raised by the plugin install workflow."""

from pathlib import Path
from typing import Optional


class PluginError(Exception):
    """Base class for plugin install/configure errors."""


class InstallSpawnError(PluginError):
    """The package installer process could not be started."""

    def __init__(self, package: str, reason: Optional[str] = None):
        self.package = package
        message = f"Cannot install {package}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InstallOutputParseError(PluginError):
    """The installer summary line did not have enough fields."""

    def __init__(self, output: str):
        self.output = output
        super().__init__("Cannot parse installer output while installing plugin.")


class OptionValidationError(PluginError):
    """A prompt answer does not satisfy its option schema."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)


class ManifestLoadError(PluginError):
    """The installed package's manifest could not be loaded."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"Cannot load plugin manifest from {path}: {message}")


class PluginNotConfiguredError(PluginError):
    """The plugin has no entry in the system config."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Plugin '{name}' is not present in system config")


class ConfigDocumentError(PluginError):
    """A config document could not be read or parsed."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"Invalid config document {path}: {message}")
