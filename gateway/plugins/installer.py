"""Plugin install workflow - fetch, prompt, then update config documents."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from gateway.errors import PluginNotConfiguredError
from gateway.plugins.config import GatewayConfigService
from gateway.plugins.fetcher import PackageFetcher
from gateway.plugins.loader import ManifestLoader
from gateway.plugins.manifest import PluginManifest
from gateway.plugins.options import OptionPrompter

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Outcome of installing or configuring one plugin."""

    plugin_name: str
    package: str
    options: Dict[str, Any] = field(default_factory=dict)
    plugin_enabled: bool = False
    policies_added: bool = False
    policies: List[str] = field(default_factory=list)


class PluginInstaller:
    """Runs the sequential fetch -> prompt -> merge/write pipeline.

    Nothing is written until all answers are in. The system config is only
    touched when the user chose to enable the plugin, and the gateway config
    only when they chose to whitelist its policies.
    """

    def __init__(
        self,
        config: GatewayConfigService,
        prompter: OptionPrompter,
        fetcher: PackageFetcher,
        loader: Optional[ManifestLoader] = None,
    ):
        self.config = config
        self.prompter = prompter
        self.fetcher = fetcher
        self.loader = loader or ManifestLoader()

    def install(
        self,
        package: str,
        presets: Optional[Mapping[str, str]] = None,
        enable_plugin: Optional[bool] = None,
        add_policies: Optional[bool] = None,
    ) -> InstallResult:
        """Install a plugin package and configure it.

        Raises:
            InstallSpawnError: if the package manager cannot be started
            InstallOutputParseError: if its output cannot be parsed
            ManifestLoadError: if the installed manifest is unusable
        """
        installed = self.fetcher.fetch(package)
        manifest = self.loader.load(installed.path, installed.name)
        return self._apply(manifest, presets, enable_plugin, add_policies)

    def configure(
        self,
        plugin_name: str,
        presets: Optional[Mapping[str, str]] = None,
        enable_plugin: Optional[bool] = None,
        add_policies: Optional[bool] = None,
    ) -> InstallResult:
        """Re-run option prompts for a plugin that is already installed.

        Raises:
            PluginNotConfiguredError: if system config has no entry for it
            ManifestLoadError: if the installed manifest is unusable
        """
        if not self.config.has_plugin(plugin_name):
            raise PluginNotConfiguredError(plugin_name)

        package = self.config.get_plugin_package(plugin_name)
        manifest = self.loader.load(self.fetcher.package_path(package), package)
        if manifest.plugin_name != plugin_name:
            logger.warning(
                f"Manifest of {package} declares name '{manifest.plugin_name}', "
                f"configured as '{plugin_name}'"
            )
        return self._apply(manifest, presets, enable_plugin, add_policies)

    def _apply(
        self,
        manifest: PluginManifest,
        presets: Optional[Mapping[str, str]],
        enable_plugin: Optional[bool],
        add_policies: Optional[bool],
    ) -> InstallResult:
        name = manifest.plugin_name
        previous = self.config.get_plugin_options(name)
        answers = self.prompter.collect(
            manifest,
            previous=previous,
            presets=presets,
            enable_plugin=enable_plugin,
            add_policies=add_policies,
        )

        result = InstallResult(plugin_name=name, package=manifest.package, options=answers.options)

        if answers.enable_plugin:
            self.config.enable_plugin(manifest, answers.options)
            result.plugin_enabled = True
        else:
            logger.info(f"Leaving system config untouched for {name}")

        if answers.add_policies:
            result.policies = self.config.whitelist_policies(manifest.policies)
            result.policies_added = True
        else:
            logger.info(f"Leaving gateway config untouched for {name}")

        return result
