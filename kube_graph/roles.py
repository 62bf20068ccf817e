"""Control-plane detection strategies for the graph builder."""

from typing import Protocol

from kube_graph.models.resources import NodeResource

CONTROL_PLANE_LABELS = (
    "node-role.kubernetes.io/control-plane",
    "node-role.kubernetes.io/master",
)


class RoleClassifier(Protocol):
    """Decides whether a node is the control-plane (master) node."""

    name: str

    def is_master(self, node: NodeResource) -> bool: ...


class TaintRoleClassifier:
    """Treat any node carrying taint metadata as the master.

    This is a heuristic: taints are scheduling restrictions and say nothing
    about the node role. Clusters with tainted workers will report several
    masters, and untainted control planes none.
    """

    name = "taints"

    def is_master(self, node: NodeResource) -> bool:
        # Presence counts, an explicit empty list included
        return node.taints is not None


class LabelRoleClassifier:
    """Identify the master by the well-known node-role labels."""

    name = "labels"

    def __init__(self, labels: tuple[str, ...] = CONTROL_PLANE_LABELS):
        self.labels = labels

    def is_master(self, node: NodeResource) -> bool:
        return any(label in node.labels for label in self.labels)


def get_classifier(name: str) -> RoleClassifier:
    """Return the classifier registered under ``name``.

    Raises:
        ValueError: If no classifier has that name
    """
    classifiers = {
        TaintRoleClassifier.name: TaintRoleClassifier,
        LabelRoleClassifier.name: LabelRoleClassifier,
    }
    if name not in classifiers:
        raise ValueError(f"Unknown role classifier '{name}', expected one of {sorted(classifiers)}")
    return classifiers[name]()
