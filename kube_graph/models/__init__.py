"""Data models for cluster resources and graph snapshots."""

from kube_graph.models.graph import GraphLink, GraphNode, GraphSnapshot
from kube_graph.models.resources import (
    Condition,
    NodeResource,
    PodResource,
    parse_namespace_list,
    parse_node_list,
    parse_pod_list,
)

__all__ = [
    "Condition",
    "NodeResource",
    "PodResource",
    "GraphNode",
    "GraphLink",
    "GraphSnapshot",
    "parse_namespace_list",
    "parse_node_list",
    "parse_pod_list",
]
