"""Tests for client config serialization."""

from __future__ import annotations

import logging

import pytest

from ctxstore.errors import InvalidContextError
from ctxstore.schema import (
    SCHEMA_VERSION,
    dump_client_config,
    dump_context,
    get_schema_version,
    load_client_config,
    load_context,
)
from ctxstore.types import ClientConfig, ClusterServer, ContextType


class TestSchemaVersion:
    """Tests for schema versioning."""

    def test_schema_version_exists(self):
        """Schema version should be defined."""
        assert SCHEMA_VERSION == "0.1"

    def test_dump_stamps_version(self, seed_config: ClientConfig):
        assert get_schema_version(dump_client_config(seed_config)) == SCHEMA_VERSION

    def test_missing_version_defaults(self):
        assert get_schema_version({}) == "0.1"

    def test_other_version_loads_with_warning(self, seed_config, caplog):
        data = dump_client_config(seed_config)
        data["_schema_version"] = "9.9"
        with caplog.at_level(logging.WARNING, logger="ctxstore.schema"):
            assert load_client_config(data) == seed_config
        assert "'9.9'" in caplog.text

    def test_current_version_is_quiet(self, seed_config, caplog):
        with caplog.at_level(logging.WARNING, logger="ctxstore.schema"):
            load_client_config(dump_client_config(seed_config))
        assert caplog.records == []


class TestDumpClientConfig:
    """Tests for dump_client_config()."""

    def test_dump_layout(self, seed_config: ClientConfig):
        data = dump_client_config(seed_config)

        assert data["current_context"] == {"k8s": "test-mc", "tmc": "test-tmc"}
        assert data["known_contexts"][0] == {
            "name": "test-mc",
            "type": "k8s",
            "cluster_opts": {
                "endpoint": "test-endpoint",
                "path": "test-path",
                "context": "test-context",
                "is_management_cluster": True,
            },
        }
        assert data["known_contexts"][1] == {
            "name": "test-tmc",
            "type": "tmc",
            "global_opts": {"endpoint": "test-endpoint"},
        }

    def test_dump_legacy_projection(self, seed_config: ClientConfig):
        """Servers are written for older readers; only k8s drives current_server."""
        data = dump_client_config(seed_config)

        assert data["current_server"] == "test-mc"
        assert [(s["name"], s["type"]) for s in data["known_servers"]] == [
            ("test-mc", "managementcluster"),
            ("test-tmc", "global"),
        ]

    def test_dump_no_current_server(self, seed_config: ClientConfig):
        del seed_config.current_context[ContextType.K8S]
        assert dump_client_config(seed_config)["current_server"] == ""

    def test_extra_keys_preserved(self, seed_config: ClientConfig):
        seed_config.extra["client_options"] = {"features": {"x": True}}
        data = dump_client_config(seed_config)
        assert data["client_options"] == {"features": {"x": True}}

    def test_extra_cannot_shadow_owned_keys(self, seed_config: ClientConfig):
        seed_config.extra["current_server"] = "bogus"
        assert dump_client_config(seed_config)["current_server"] == "test-mc"


class TestLoadClientConfig:
    """Tests for load_client_config()."""

    def test_load_empty(self):
        """Missing fields default to empty."""
        assert load_client_config({}) == ClientConfig()

    def test_load_dumped(self, seed_config: ClientConfig):
        assert load_client_config(dump_client_config(seed_config)) == seed_config

    def test_unknown_keys_kept_in_extra(self):
        config = load_client_config({"client_options": {"a": 1}, "known_contexts": []})
        assert config.extra == {"client_options": {"a": 1}}

    def test_dangling_current_dropped(self, seed_config: ClientConfig):
        data = dump_client_config(seed_config)
        data["current_context"]["tmc"] = "missing"
        config = load_client_config(data)
        assert config.current_context == {ContextType.K8S: "test-mc"}

    def test_legacy_current_server_adopted(self, seed_config: ClientConfig):
        """A k8s pointer only recorded as current_server is picked up."""
        data = dump_client_config(seed_config)
        del data["current_context"]["k8s"]
        config = load_client_config(data)
        assert config.current_context[ContextType.K8S] == "test-mc"

    def test_legacy_current_server_ignored_for_tmc(self, seed_config: ClientConfig):
        data = dump_client_config(seed_config)
        del data["current_context"]["k8s"]
        data["current_server"] = "test-tmc"
        config = load_client_config(data)
        assert ContextType.K8S not in config.current_context

    def test_duplicate_names_rejected(self, seed_config: ClientConfig):
        data = dump_client_config(seed_config)
        data["known_contexts"].append(dict(data["known_contexts"][0], type="k8s"))
        with pytest.raises(InvalidContextError, match="duplicate context name"):
            load_client_config(data)

    def test_unknown_current_type_rejected(self):
        with pytest.raises(InvalidContextError, match="unknown context type"):
            load_client_config({"current_context": {"eks": "x"}})

    def test_non_mapping_rejected(self):
        with pytest.raises(InvalidContextError, match="must be a mapping"):
            load_client_config(["not", "a", "dict"])

    @pytest.mark.parametrize(
        "data, match",
        [
            ({"known_contexts": 7}, "known_contexts must be a list"),
            ({"known_contexts": {"name": "x"}}, "known_contexts must be a list"),
            ({"current_context": ["k8s"]}, "current_context must be a mapping"),
            ({"current_context": "k8s"}, "current_context must be a mapping"),
            ({"current_context": {"k8s": ["x"]}}, "must be a string"),
            ({"current_server": 3}, "current_server must be a string"),
        ],
    )
    def test_wrong_field_types_rejected(self, data, match):
        with pytest.raises(InvalidContextError, match=match):
            load_client_config(data)


class TestLoadContext:
    """Tests for load_context()."""

    def test_tolerates_missing_option_fields(self):
        ctx = load_context({"name": "mc", "type": "k8s", "cluster_opts": {}})
        assert ctx.cluster_opts == ClusterServer()

    def test_round_trip(self, seed_config: ClientConfig):
        for ctx in seed_config.known_contexts:
            assert load_context(dump_context(ctx)) == ctx

    def test_payload_mismatch_rejected(self):
        with pytest.raises(InvalidContextError):
            load_context({"name": "t", "type": "tmc", "cluster_opts": {}})

    def test_non_mapping_options_rejected(self):
        with pytest.raises(InvalidContextError, match="options must be a mapping"):
            load_context({"name": "t", "type": "tmc", "global_opts": "x"})

    @pytest.mark.parametrize(
        "data, match",
        [
            ({"name": ["x"], "type": "tmc", "global_opts": {}}, "context name"),
            ({"name": 5, "type": "tmc", "global_opts": {}}, "context name"),
            ({"name": "x", "type": ["k8s"], "cluster_opts": {}}, "type of context"),
            ({"name": "x", "type": "tmc", "global_opts": {"endpoint": 1}}, "endpoint"),
            ({"name": "x", "type": "k8s", "cluster_opts": {"path": None}}, "path"),
        ],
    )
    def test_wrong_field_types_rejected(self, data, match):
        with pytest.raises(InvalidContextError, match=match):
            load_context(data)

    @pytest.mark.parametrize("flag", ["false", "true", 0, 1, None])
    def test_management_flag_must_be_bool(self, flag):
        """A hand-edited flag is rejected rather than coerced."""
        data = {
            "name": "mc",
            "type": "k8s",
            "cluster_opts": {"is_management_cluster": flag},
        }
        with pytest.raises(InvalidContextError, match="is_management_cluster must be a boolean"):
            load_context(data)

    def test_management_flag_false_kept(self):
        data = {"name": "mc", "type": "k8s", "cluster_opts": {"is_management_cluster": False}}
        assert load_context(data).cluster_opts.is_management_cluster is False
