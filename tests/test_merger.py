"""Tests for merging plugins and policies into config documents."""

import json

import pytest
import yaml

from gateway.documents import load_document
from gateway.plugins.merger import merge_plugin, merge_policies, migrate_plugin_list


@pytest.fixture(params=["json", "yml"])
def make_document(request, tmp_path):
    """Build a document of either format from plain data."""
    def _make(data, stem="config"):
        path = tmp_path / f"{stem}.{request.param}"
        if request.param == "json":
            path.write_text(json.dumps(data))
        else:
            path.write_text(yaml.safe_dump(data, default_flow_style=False, sort_keys=False) if data else "")
        return load_document(path)
    return _make


def reloaded(document):
    document.save()
    return load_document(document.path)


class TestMergePlugin:
    """Tests for merge_plugin function."""

    def test_option_stored_without_package_when_names_match(self, make_document):
        document = make_document({"plugins": {}})

        merge_plugin(document, "foo", "foo", {"timeout": 30})

        result = reloaded(document)
        assert result.get(("plugins", "foo")) == {"timeout": 30}
        assert result.get(("plugins", "foo", "package")) is None

    def test_package_recorded_when_names_differ(self, make_document):
        document = make_document({"plugins": {}})

        merge_plugin(document, "rewrite", "express-gateway-plugin-rewrite", {"allowRedirect": True})

        assert reloaded(document).get(("plugins", "rewrite")) == {
            "package": "express-gateway-plugin-rewrite",
            "allowRedirect": True,
        }

    def test_plugin_without_options_gets_empty_entry(self, make_document):
        document = make_document({"db": {"redis": {"emulate": True}}})

        merge_plugin(document, "foo", "foo", {})

        result = reloaded(document)
        assert result.get(("plugins",)) == {"foo": None}
        assert result.get(("db", "redis", "emulate")) is True

    def test_existing_entry_is_updated_not_replaced(self, make_document):
        document = make_document({"plugins": {"foo": {"timeout": 10, "prefix": "/v1"}, "bar": None}})

        merge_plugin(document, "foo", "foo", {"timeout": 30})

        result = reloaded(document)
        assert result.get(("plugins", "foo")) == {"timeout": 30, "prefix": "/v1"}
        assert list(result.get(("plugins",))) == ["foo", "bar"]

    def test_legacy_plugin_list_is_migrated(self, make_document):
        document = make_document({"plugins": ["bar", "foo"]})

        merge_plugin(document, "foo", "foo", {"timeout": 30})

        assert reloaded(document).get(("plugins",)) == {"bar": None, "foo": {"timeout": 30}}


class TestMergePolicies:
    """Tests for merge_policies function."""

    def test_dedup_and_order(self, make_document):
        document = make_document({"policies": ["a", "b"]})

        assert merge_policies(document, ["b", "c"]) == ["a", "b", "c"]
        assert reloaded(document).get(("policies",)) == ["a", "b", "c"]

    def test_declaration_order_kept(self, make_document):
        document = make_document({"http": {"port": 8080}})

        merge_policies(document, ["x", "y", "z", "x"])

        assert reloaded(document).get(("policies",)) == ["x", "y", "z"]

    def test_idempotent(self, make_document):
        document = make_document({"policies": ["a"]})
        merge_policies(document, ["b", "c"])
        first = reloaded(document)

        assert merge_policies(first, ["b", "c"]) == ["a", "b", "c"]
        assert reloaded(first).get(("policies",)) == ["a", "b", "c"]


class TestMigratePluginList:
    """Tests for migrate_plugin_list function."""

    def test_mapping_left_alone(self, make_document):
        document = make_document({"plugins": {"foo": None}})
        assert migrate_plugin_list(document) is False

    def test_list_converted(self, make_document):
        document = make_document({"plugins": ["foo", "bar", "foo"]})

        assert migrate_plugin_list(document) is True
        assert reloaded(document).get(("plugins",)) == {"foo": None, "bar": None}


class TestYamlFormattingPreserved:
    """Merges leave unrelated YAML text untouched."""

    def test_gateway_config_comments_survive(self, tmp_path):
        text = (
            "# Gateway config\n"
            "http:\n"
            "  port: 8080   # public port\n"
            "policies:\n"
            "  - basic-auth\n"
            "  - proxy\n"
            "pipelines:\n"
            "  default:\n"
            "    apiEndpoints:\n"
            "      - api\n"
        )
        path = tmp_path / "gateway.config.yml"
        path.write_text(text)
        document = load_document(path)

        merge_policies(document, ["proxy", "rewrite"])
        document.save()

        assert path.read_text() == (
            "# Gateway config\n"
            "http:\n"
            "  port: 8080   # public port\n"
            "policies:\n"
            "  - basic-auth\n"
            "  - proxy\n"
            "  - rewrite\n"
            "pipelines:\n"
            "  default:\n"
            "    apiEndpoints:\n"
            "      - api"
        )
