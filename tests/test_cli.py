"""Tests for the manage_plugins command line."""

import argparse
import json
from unittest.mock import patch

import pytest
import yaml

import manage_plugins
from gateway.errors import InstallOutputParseError
from gateway.plugins.fetcher import InstalledPackage


@pytest.fixture(autouse=True)
def no_log_files():
    with patch("manage_plugins.setup_logging"):
        yield


@pytest.fixture
def project(tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "system.config.yml").write_text("plugins:\n  jwt-auth:\n")
    (config_dir / "gateway.config.yml").write_text("policies:\n  - proxy\n")

    package_dir = tmp_path / "node_modules" / "foo"
    package_dir.mkdir(parents=True)
    (package_dir / "plugin.json").write_text(json.dumps({
        "options": {"timeout": {"type": "number", "required": True}},
        "policies": ["foo"],
    }))
    return tmp_path


def run(project, *argv):
    manage_plugins.main(["--cwd", str(project), "--config-dir", str(project / "config"), *argv])


class TestParsePresets:
    """Tests for parse_presets function."""

    def test_pairs(self):
        assert manage_plugins.parse_presets(["allowRedirect=true", "prefix=/a=b"]) == {
            "allowRedirect": "true",
            "prefix": "/a=b",
        }

    def test_none(self):
        assert manage_plugins.parse_presets(None) == {}

    def test_malformed(self):
        with pytest.raises(argparse.ArgumentTypeError):
            manage_plugins.parse_presets(["allowRedirect"])


class TestMain:
    """Tests for main function."""

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            manage_plugins.main([])
        assert exc_info.value.code == 1
        assert "install" in capsys.readouterr().out

    def test_malformed_option_is_usage_error(self, project):
        with pytest.raises(SystemExit) as exc_info:
            run(project, "install", "foo", "-p", "timeout")
        assert exc_info.value.code == 2

    def test_install_non_interactive(self, project, capsys):
        installed = InstalledPackage(name="foo", path=project / "node_modules" / "foo")
        with patch.object(manage_plugins.PackageFetcher, "fetch", return_value=installed):
            run(project, "install", "foo", "-p", "timeout=30", "--enable", "--add-policies")

        assert "Plugin installed!" in capsys.readouterr().out
        system = yaml.safe_load((project / "config" / "system.config.yml").read_text())
        assert system["plugins"] == {"jwt-auth": None, "foo": {"timeout": 30}}
        gateway = yaml.safe_load((project / "config" / "gateway.config.yml").read_text())
        assert gateway["policies"] == ["proxy", "foo"]

    def test_parse_error_exits_before_writing(self, project):
        before = (project / "config" / "system.config.yml").read_text()
        error = InstallOutputParseError("npm ERR!")
        with patch.object(manage_plugins.PackageFetcher, "fetch", side_effect=error):
            with pytest.raises(SystemExit) as exc_info:
                run(project, "install", "foo", "--enable", "--add-policies")

        assert exc_info.value.code == 1
        assert (project / "config" / "system.config.yml").read_text() == before

    def test_configure_unknown_plugin_fails(self, project):
        with pytest.raises(SystemExit) as exc_info:
            run(project, "configure", "foo", "--no-enable", "--no-add-policies")
        assert exc_info.value.code == 1

    def test_migrate(self, project, capsys):
        path = project / "config" / "system.config.yml"
        path.write_text("plugins:\n  - jwt-auth\n")

        run(project, "migrate")

        assert "Migrated plugins" in capsys.readouterr().out
        assert yaml.safe_load(path.read_text()) == {"plugins": {"jwt-auth": None}}
