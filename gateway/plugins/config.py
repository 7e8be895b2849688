"""Gateway config service - reads and updates system and gateway config files."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from gateway.constants import (
    CONFIG_DIR,
    CONFIG_SUFFIXES,
    GATEWAY_CONFIG_NAME,
    GATEWAY_CONFIG_PATH,
    SYSTEM_CONFIG_NAME,
    SYSTEM_CONFIG_PATH,
)
from gateway.documents import StructuredDocument, load_document
from gateway.plugins.manifest import PluginManifest
from gateway.plugins.merger import (
    PACKAGE_KEY,
    PLUGINS_KEY,
    merge_plugin,
    merge_policies,
    migrate_plugin_list,
)

logger = logging.getLogger(__name__)


def resolve_config_path(config_dir: Path, name: str, override: Optional[str] = None) -> Path:
    """Locate a config file.

    An explicit override wins; otherwise the first existing
    ``<name>.yml|.yaml|.json`` in ``config_dir`` is used, defaulting to
    ``<name>.yml``.
    """
    if override:
        return Path(override)

    for suffix in CONFIG_SUFFIXES:
        candidate = config_dir / f"{name}{suffix}"
        if candidate.exists():
            return candidate
    return config_dir / f"{name}{CONFIG_SUFFIXES[0]}"


class GatewayConfigService:
    """Manages the system config (plugins) and gateway config (policies).

    System config format (YAML shown, JSON also supported):

        plugins:
          rewrite:
            package: express-gateway-plugin-rewrite
            allowRedirect: true

    Gateway config format:

        policies:
          - basic-auth
          - rewrite

    Documents are read fresh for every operation and written back in full.
    """

    def __init__(
        self,
        system_config_path: Optional[Path] = None,
        gateway_config_path: Optional[Path] = None,
        config_dir: Path = CONFIG_DIR,
    ):
        self.system_config_path = system_config_path or resolve_config_path(
            config_dir, SYSTEM_CONFIG_NAME, SYSTEM_CONFIG_PATH
        )
        self.gateway_config_path = gateway_config_path or resolve_config_path(
            config_dir, GATEWAY_CONFIG_NAME, GATEWAY_CONFIG_PATH
        )

    def load_system_config(self) -> StructuredDocument:
        return load_document(self.system_config_path)

    def load_gateway_config(self) -> StructuredDocument:
        return load_document(self.gateway_config_path)

    def _plugin_entry(self, name: str) -> Any:
        document = self.load_system_config()
        plugins = document.get((PLUGINS_KEY,))
        if isinstance(plugins, list):
            return {} if name in plugins else None
        if not isinstance(plugins, dict) or name not in plugins:
            return None
        return plugins[name] if plugins[name] is not None else {}

    def has_plugin(self, name: str) -> bool:
        """Check if a plugin has an entry in system config."""
        return self._plugin_entry(name) is not None

    def get_plugin_options(self, name: str) -> Dict[str, Any]:
        """Get the currently configured values of a plugin."""
        entry = self._plugin_entry(name)
        if not isinstance(entry, dict):
            return {}
        return {k: v for k, v in entry.items() if k != PACKAGE_KEY}

    def get_plugin_package(self, name: str) -> str:
        """Get the install identifier of a plugin (its name unless recorded)."""
        entry = self._plugin_entry(name)
        if isinstance(entry, dict) and entry.get(PACKAGE_KEY):
            return str(entry[PACKAGE_KEY])
        return name

    def enable_plugin(self, manifest: PluginManifest, options: Mapping[str, Any]) -> None:
        """Add the plugin and its options to system config."""
        document = self.load_system_config()
        merge_plugin(document, manifest.plugin_name, manifest.package, options)
        document.save()
        logger.info(f"Enabled plugin: {manifest.plugin_name}")

    def whitelist_policies(self, policies: Iterable[str]) -> List[str]:
        """Add policies to the gateway config whitelist."""
        document = self.load_gateway_config()
        merged = merge_policies(document, policies)
        document.save()
        return merged

    def migrate(self) -> bool:
        """Convert a list-style ``plugins`` section of system config to a mapping.

        Returns:
            True if the file was rewritten
        """
        document = self.load_system_config()
        if not migrate_plugin_list(document):
            logger.info(f"No migration needed for {self.system_config_path}")
            return False
        document.save()
        return True
