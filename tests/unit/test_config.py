"""Tests for configuration loading."""

import pytest

from kube_graph.config import GraphConfig
from kube_graph.exceptions import ConfigurationError


def test_defaults():
    config = GraphConfig()

    assert (config.master_size, config.minion_size, config.pod_size) == (15, 15, 15)
    assert config.link_size_pod_to_minion == 150
    assert config.link_size_minion_to_master == 250
    assert config.dummy_nodes == 0
    assert config.namespaces_url == "http://127.0.0.1:8001/api/v1/namespaces/"
    assert config.nodes_api_url == "http://127.0.0.1:8001/api/v1/nodes"
    assert config.polling_interval_secs == 1
    assert config.namespace == "default"
    assert config.role_classifier == "taints"
    assert config.skip_overlapping_ticks is False


def test_from_env_uses_camel_case_variable_names():
    environ = {
        "masterSize": "30",
        "dummyNodes": "4",
        "namespacesUrl": "http://proxy:8001/api/v1/namespaces",
        "pollingIntervalInSeconds": "2.5",
        "skipOverlappingTicks": "true",
        "UNRELATED": "x",
    }

    config = GraphConfig.from_env(environ)

    assert config.master_size == 30
    assert config.dummy_nodes == 4
    assert config.namespaces_url == "http://proxy:8001/api/v1/namespaces/"
    assert config.polling_interval_secs == 2.5
    assert config.skip_overlapping_ticks is True
    assert config.minion_size == 15


def test_from_env_overrides_win():
    config = GraphConfig.from_env({"namespace": "apps"}, namespace="kube-system", port=None)

    assert config.namespace == "kube-system"
    assert config.port == 3000


def test_from_env_invalid_value_raises_configuration_error():
    with pytest.raises(ConfigurationError) as exc_info:
        GraphConfig.from_env({"podSize": "big", "dummyNodes": "-1"})

    assert "Invalid configuration from environment" in exc_info.value.message
    assert "pod_size" in exc_info.value.details
    assert "dummy_nodes" in exc_info.value.details


@pytest.mark.parametrize(
    "field,value",
    [
        ("master_size", 0),
        ("link_size_pod_to_minion", -5),
        ("polling_interval_secs", 0),
        ("namespace", "  "),
        ("nodes_api_url", ""),
        ("role_classifier", "annotations"),
    ],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValueError):
        GraphConfig(**{field: value})


def test_pods_url():
    config = GraphConfig(namespaces_url="http://proxy/api/v1/namespaces/")

    assert config.pods_url("kube-system") == "http://proxy/api/v1/namespaces/kube-system/pods"


def test_save_and_load(tmp_path):
    path = tmp_path / "kube-graph.yml"
    GraphConfig(dummy_nodes=3, namespace="apps").save(str(path))

    loaded = GraphConfig.load(str(path))

    assert loaded.dummy_nodes == 3
    assert loaded.namespace == "apps"


def test_load_with_overrides(tmp_path):
    path = tmp_path / "kube-graph.yml"
    path.write_text("namespace: apps\nport: 8080\n")

    loaded = GraphConfig.load(str(path), namespace="kube-system")

    assert loaded.namespace == "kube-system"
    assert loaded.port == 8080


def test_load_missing_file():
    with pytest.raises(ConfigurationError, match="not found"):
        GraphConfig.load("nonexistent.yml")


def test_load_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("namespace: [unclosed\n")

    with pytest.raises(ConfigurationError, match="Failed to parse"):
        GraphConfig.load(str(path))


def test_load_non_mapping(tmp_path):
    path = tmp_path / "list.yml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ConfigurationError, match="Invalid configuration file"):
        GraphConfig.load(str(path))
