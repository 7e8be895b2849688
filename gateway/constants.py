"""Global constants for the gateway plugin tools."""

import os
from pathlib import Path

# Working directory the package installer runs in
PROJECT_DIR = Path(os.getenv("EG_PROJECT_DIR", ".")).resolve()

# Directory holding system.config.yml and gateway.config.yml
CONFIG_DIR = Path(os.getenv("EG_CONFIG_DIR", str(PROJECT_DIR / "config")))

# Explicit config file overrides (empty means "look inside CONFIG_DIR")
SYSTEM_CONFIG_PATH = os.getenv("EG_SYSTEM_CONFIG_PATH", "")
GATEWAY_CONFIG_PATH = os.getenv("EG_GATEWAY_CONFIG_PATH", "")

SYSTEM_CONFIG_NAME = "system.config"
GATEWAY_CONFIG_NAME = "gateway.config"
CONFIG_SUFFIXES = (".yml", ".yaml", ".json")

# Package manager used to fetch plugins
PLUGIN_INSTALLER = os.getenv("EG_PLUGIN_INSTALLER", "npm")
PLUGIN_CACHE_MIN = int(os.getenv("EG_PLUGIN_CACHE_MIN", str(24 * 60 * 60)))
PACKAGES_DIR_NAME = "node_modules"

LOG_DIR = Path(os.getenv("EG_LOG_DIR", str(PROJECT_DIR / "log")))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
