"""Shared fixtures: the two-context config used across the test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from ctxstore.settings import StoreSettings
from ctxstore.store import ContextStore
from ctxstore.types import ClientConfig, ClusterServer, Context, ContextType, GlobalServer


def k8s_context(name: str, **opts) -> Context:
    """A K8S context with test cluster options."""
    defaults = {
        "endpoint": "test-endpoint",
        "path": "test-path",
        "context": "test-context",
        "is_management_cluster": True,
    }
    defaults.update(opts)
    return Context(name=name, type=ContextType.K8S, cluster_opts=ClusterServer(**defaults))


def tmc_context(name: str, endpoint: str = "test-endpoint") -> Context:
    """A TMC context with a test endpoint."""
    return Context(name=name, type=ContextType.TMC, global_opts=GlobalServer(endpoint))


@pytest.fixture
def seed_config() -> ClientConfig:
    """One current context of each type: test-mc (k8s) and test-tmc (tmc)."""
    return ClientConfig(
        known_contexts=[k8s_context("test-mc"), tmc_context("test-tmc")],
        current_context={
            ContextType.K8S: "test-mc",
            ContextType.TMC: "test-tmc",
        },
    )


@pytest.fixture
def settings(tmp_path: Path) -> StoreSettings:
    """Settings pointing at a temporary config directory."""
    return StoreSettings(config_dir=str(tmp_path / "config"))


@pytest.fixture
def empty_store(settings: StoreSettings) -> ContextStore:
    """A store with nothing persisted yet."""
    return settings.connect()


@pytest.fixture
def store(empty_store: ContextStore, seed_config: ClientConfig) -> ContextStore:
    """A store seeded with the two-context config."""
    empty_store.store_client_config(seed_config)
    return empty_store


@pytest.fixture
def make_k8s_context():
    """Factory for K8S contexts."""
    return k8s_context


@pytest.fixture
def make_tmc_context():
    """Factory for TMC contexts."""
    return tmc_context
