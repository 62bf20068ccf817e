"""Pytest configuration and shared fixtures."""

import pytest
from hypothesis import Verbosity, settings

from kube_graph.config import GraphConfig
from tests.helpers import FakeFetcher, item_list, namespace_list, node_item, pod_item

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")


@pytest.fixture
def config():
    """Default configuration with a short polling interval."""
    return GraphConfig(polling_interval_secs=0.05)


@pytest.fixture
def sample_nodes():
    """NodeList with a not-ready worker n1 and a tainted master n2."""
    return item_list(
        "NodeList",
        node_item("n1", ready=False),
        node_item(
            "n2",
            ready=True,
            taints=[{"key": "node-role.kubernetes.io/master", "effect": "NoSchedule"}],
        ),
    )


@pytest.fixture
def sample_pods():
    """PodList of the default namespace: one pod scheduled on n1."""
    return item_list("PodList", pod_item("web-1", node_name="n1", labels={"app": "web"}))


@pytest.fixture
def fake_fetcher(sample_nodes, sample_pods):
    """Fetcher serving the sample cluster for namespaces default and kube-system."""
    return FakeFetcher(
        nodes=sample_nodes,
        pods={
            "default": sample_pods,
            "kube-system": item_list("PodList", pod_item("dns-1", node_name="n2")),
        },
        namespaces=namespace_list("default", "kube-system"),
    )
