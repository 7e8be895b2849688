"""Package fetcher - installs a plugin package through the package manager."""

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List

from gateway.constants import PACKAGES_DIR_NAME, PLUGIN_CACHE_MIN, PLUGIN_INSTALLER
from gateway.errors import InstallOutputParseError, InstallSpawnError

logger = logging.getLogger(__name__)

# add<TAB>name<TAB>version<TAB>relative/install/path
MIN_OUTPUT_FIELDS = 4


@dataclass(frozen=True)
class InstalledPackage:
    """A package reported as installed by the package manager."""

    name: str
    path: Path


def parse_install_output(output: str, cwd: Path) -> InstalledPackage:
    """Parse the installer's tab-delimited summary.

    Only the last line is considered: field 1 is the resolved package name
    and field 3 the install path relative to ``cwd``.

    Raises:
        InstallOutputParseError: if the line has fewer than 4 fields
    """
    lines = output.strip().split("\n")
    fields = lines[-1].rstrip("\r").split("\t")

    if len(fields) < MIN_OUTPUT_FIELDS:
        raise InstallOutputParseError(output)

    return InstalledPackage(name=fields[1], path=cwd / fields[3])


class PackageFetcher:
    """Runs the package manager and reports what it installed."""

    def __init__(
        self,
        cwd: Path,
        installer: str = PLUGIN_INSTALLER,
        cache_min: int = PLUGIN_CACHE_MIN,
    ):
        """
        Args:
            cwd: Directory the package manager is run in
            installer: Package manager command, e.g. "npm"
            cache_min: Minimum cache age (seconds) before refetching metadata
        """
        self.cwd = cwd
        self.installer = installer
        self.cache_min = cache_min

    def build_command(self, package: str) -> List[str]:
        return shlex.split(self.installer) + [
            "install", package,
            "--cache-min", str(self.cache_min),
            "--parseable",
        ]

    def fetch(self, package: str) -> InstalledPackage:
        """Install a package and resolve where it landed.

        stdout is captured for parsing; stderr is passed through to ours.

        Raises:
            InstallSpawnError: if the installer cannot be started
            InstallOutputParseError: if its summary cannot be parsed
        """
        cmd = self.build_command(package)
        logger.info(f"Installing {package}: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                cwd=str(self.cwd),
                env=os.environ.copy(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=None,
            )
        except OSError as e:
            logger.error(f"Cannot install {package}: {e}")
            raise InstallSpawnError(package, str(e)) from e

        stdout, _ = process.communicate()
        if process.returncode:
            logger.warning(f"Installer exited with status {process.returncode} for {package}")

        output = stdout.decode("utf-8", errors="replace") if stdout else ""
        try:
            installed = parse_install_output(output, self.cwd)
        except InstallOutputParseError:
            logger.error("Cannot parse installer output while installing plugin.")
            raise

        logger.info(f"Installed {installed.name} at {installed.path}")
        return installed

    def package_path(self, package: str) -> Path:
        """Path of an already installed package under the working directory."""
        return self.cwd / PACKAGES_DIR_NAME / package
