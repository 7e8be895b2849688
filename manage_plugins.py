#!/usr/bin/env python3
"""Gateway plugin manager CLI.

Usage:
    python manage_plugins.py install express-gateway-plugin-url-rewrite
    python manage_plugins.py configure url-rewrite -p "allowRedirect=true"
    python manage_plugins.py migrate
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

# Load environment variables FIRST (before importing project modules)
load_dotenv('.env')

from cli.logs import setup_logging
from cli.prompter import TerminalPrompter
from cli.renderer import ResultRenderer
from gateway.constants import CONFIG_DIR, LOG_DIR, LOG_LEVEL, PLUGIN_CACHE_MIN, PLUGIN_INSTALLER, PROJECT_DIR
from gateway.errors import InstallOutputParseError, PluginError
from gateway.plugins.config import GatewayConfigService
from gateway.plugins.fetcher import PackageFetcher
from gateway.plugins.installer import PluginInstaller

logger = logging.getLogger(__name__)


def parse_presets(values: Optional[List[str]]) -> Dict[str, str]:
    """Turn repeated ``-p KEY=VALUE`` arguments into a mapping."""
    presets = {}
    for value in values or []:
        key, sep, answer = value.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got '{value}'")
        presets[key.strip()] = answer
    return presets


def get_config(args) -> GatewayConfigService:
    """Create a GatewayConfigService from command line options."""
    return GatewayConfigService(
        system_config_path=args.system_config,
        gateway_config_path=args.gateway_config,
        config_dir=args.config_dir,
    )


def get_installer(args) -> PluginInstaller:
    """Create a PluginInstaller wired to the terminal."""
    fetcher = PackageFetcher(cwd=args.cwd, installer=args.installer, cache_min=args.cache_min)
    return PluginInstaller(config=get_config(args), prompter=TerminalPrompter(), fetcher=fetcher)


def cmd_install(args):
    """Install a plugin package and configure it."""
    installer = get_installer(args)
    result = installer.install(
        args.package,
        presets=parse_presets(args.option),
        enable_plugin=args.enable,
        add_policies=args.add_policies,
    )
    ResultRenderer().show_result(result, "Plugin installed!")


def cmd_configure(args):
    """Configure an installed plugin."""
    installer = get_installer(args)
    result = installer.configure(
        args.plugin,
        presets=parse_presets(args.option),
        enable_plugin=args.enable,
        add_policies=args.add_policies,
    )
    ResultRenderer().show_result(result, "Plugin configured!")


def cmd_migrate(args):
    """Convert a list-style plugins section to the keyed mapping."""
    config = get_config(args)
    renderer = ResultRenderer()
    if config.migrate():
        renderer.show_message(f"Migrated plugins in {config.system_config_path}")
    else:
        renderer.show_message(f"Nothing to migrate in {config.system_config_path}")


def add_answer_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "-p", "--option",
        action="append",
        metavar="KEY=VALUE",
        help="Answer for a plugin option (repeatable)",
    )
    parser.add_argument(
        "--enable",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable the plugin in system config without asking",
    )
    parser.add_argument(
        "--add-policies",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Add the plugin's policies to gateway config without asking",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Gateway Plugin Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--cwd", type=Path, default=PROJECT_DIR, help="Directory to install packages in")
    parser.add_argument("--config-dir", type=Path, default=CONFIG_DIR, help="Directory holding config files")
    parser.add_argument("--system-config", type=Path, default=None, help="Path to system config")
    parser.add_argument("--gateway-config", type=Path, default=None, help="Path to gateway config")
    parser.add_argument("--installer", default=PLUGIN_INSTALLER, help="Package manager command")
    parser.add_argument("--cache-min", type=int, default=PLUGIN_CACHE_MIN, help=argparse.SUPPRESS)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    install_parser = subparsers.add_parser("install", help="Install a plugin")
    install_parser.add_argument("package", help="Package to install")
    add_answer_arguments(install_parser)

    configure_parser = subparsers.add_parser("configure", help="Configure a plugin")
    configure_parser.add_argument("plugin", help="Plugin name")
    add_answer_arguments(configure_parser)

    subparsers.add_parser("migrate", help="Migrate list-style plugins in system config")

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        parse_presets(getattr(args, "option", None))
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    setup_logging(LOG_DIR, LOG_LEVEL)

    commands = {
        "install": cmd_install,
        "configure": cmd_configure,
        "migrate": cmd_migrate,
    }

    try:
        commands[args.command](args)
    except InstallOutputParseError as e:
        logger.error(f"{e} Output was: {e.output!r}")
        ResultRenderer().show_error(str(e))
        sys.exit(1)
    except PluginError as e:
        logger.error(str(e))
        ResultRenderer().show_error(str(e))
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        print("\n\033[33minterrupted\033[0m")
        sys.exit(1)


if __name__ == "__main__":
    main()
