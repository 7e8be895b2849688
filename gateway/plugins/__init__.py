"""Plugin install and configuration workflow.

Imports are lazy so lightweight pieces such as PluginManifest or the option
validators can be used without loading the YAML round-trip machinery.
"""

__all__ = [
    "PluginManifest",
    "OptionSchema",
    "ManifestLoader",
    "PackageFetcher",
    "InstalledPackage",
    "OptionPrompter",
    "PromptAnswers",
    "GatewayConfigService",
    "PluginInstaller",
    "InstallResult",
]


def __getattr__(name):
    if name in ("PluginManifest", "OptionSchema"):
        from gateway.plugins import manifest
        return getattr(manifest, name)
    if name == "ManifestLoader":
        from gateway.plugins.loader import ManifestLoader
        return ManifestLoader
    if name in ("PackageFetcher", "InstalledPackage"):
        from gateway.plugins import fetcher
        return getattr(fetcher, name)
    if name in ("OptionPrompter", "PromptAnswers"):
        from gateway.plugins import options
        return getattr(options, name)
    if name == "GatewayConfigService":
        from gateway.plugins.config import GatewayConfigService
        return GatewayConfigService
    if name in ("PluginInstaller", "InstallResult"):
        from gateway.plugins import installer
        return getattr(installer, name)
    raise AttributeError(f"module 'gateway.plugins' has no attribute {name!r}")
