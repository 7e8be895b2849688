"""Plugin manifest loading - reads and validates an installed package's manifest."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from gateway.errors import ManifestLoadError
from gateway.plugins.manifest import PluginManifest

logger = logging.getLogger(__name__)


class ManifestLoader:
    """Loads plugin manifests from installed package directories.

    A package may point at its manifest through a ``gatewayPlugin`` entry in
    its ``package.json``; otherwise the first of ``MANIFEST_FILES`` found in
    the package directory is used.
    """

    PACKAGE_FILE = "package.json"
    ENTRY_POINT_KEY = "gatewayPlugin"
    MANIFEST_FILES = ("plugin.json", "plugin.yaml", "plugin.yml")

    def load(self, package_dir: Path, package: str) -> PluginManifest:
        """Load and validate the manifest of an installed package.

        Args:
            package_dir: Directory the package was installed into
            package: Install identifier reported by the package manager

        Returns:
            Validated PluginManifest

        Raises:
            ManifestLoadError: if the manifest is missing or invalid
        """
        if not package_dir.is_dir():
            raise ManifestLoadError(package_dir, "package directory does not exist")

        manifest_file = self._find_manifest(package_dir)
        data = self._read(manifest_file)
        if not isinstance(data, dict):
            raise ManifestLoadError(manifest_file, "manifest must be a mapping")

        data = dict(data)
        data["package"] = package
        try:
            manifest = PluginManifest(**data)
        except ValidationError as e:
            raise ManifestLoadError(manifest_file, str(e)) from e

        logger.info(
            f"Loaded manifest for {manifest.plugin_name} from {manifest_file} "
            f"({len(manifest.options)} option(s), {len(manifest.policies)} policy(ies))"
        )
        return manifest

    def _find_manifest(self, package_dir: Path) -> Path:
        declared = self._declared_entry_point(package_dir)
        if declared is not None:
            return declared

        for name in self.MANIFEST_FILES:
            candidate = package_dir / name
            if candidate.is_file():
                return candidate

        raise ManifestLoadError(
            package_dir,
            f"no {self.ENTRY_POINT_KEY} entry in {self.PACKAGE_FILE} "
            f"and none of {', '.join(self.MANIFEST_FILES)} found",
        )

    def _declared_entry_point(self, package_dir: Path) -> Optional[Path]:
        package_file = package_dir / self.PACKAGE_FILE
        if not package_file.is_file():
            return None

        package_info = self._read(package_file)
        entry_point = package_info.get(self.ENTRY_POINT_KEY) if isinstance(package_info, dict) else None
        if entry_point is None:
            return None
        if not isinstance(entry_point, str):
            raise ManifestLoadError(package_file, f"{self.ENTRY_POINT_KEY} must be a path")

        manifest_file = package_dir / entry_point
        if not manifest_file.is_file():
            raise ManifestLoadError(manifest_file, "declared manifest file does not exist")
        return manifest_file

    def _read(self, path: Path) -> Any:
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    return json.load(f)
                return yaml.safe_load(f)
        except json.JSONDecodeError as e:
            raise ManifestLoadError(path, f"invalid JSON: {e}") from e
        except yaml.YAMLError as e:
            raise ManifestLoadError(path, f"invalid YAML: {e}") from e
        except OSError as e:
            raise ManifestLoadError(path, str(e)) from e
