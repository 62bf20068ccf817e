"""Transform node and pod resources into a graph snapshot.

Everything here is pure: no I/O, and malformed-but-present upstream data
falls back to defaults instead of failing the snapshot.
"""

from kube_graph.config import GraphConfig
from kube_graph.exceptions import IncompleteGraph
from kube_graph.logging_config import get_logger
from kube_graph.models.graph import (
    DUMMY_COLOR,
    POD_STATUS_DELETE,
    POD_STATUS_NOT_READY,
    POD_STATUS_READY,
    POD_STATUS_START,
    STATUS_OK,
    STATUS_PULSE,
    GraphLink,
    GraphNode,
    GraphSnapshot,
)
from kube_graph.models.resources import NodeResource, PodResource
from kube_graph.roles import RoleClassifier, TaintRoleClassifier

logger = get_logger(__name__)


def pod_status(pod: PodResource) -> str:
    """Classify a pod: delete > start (Pending) > notReady > ready."""
    if pod.deletion_timestamp:
        return POD_STATUS_DELETE
    if pod.phase == "Pending":
        return POD_STATUS_START
    if pod.ready_condition_false:
        return POD_STATUS_NOT_READY
    return POD_STATUS_READY


def build_infra_nodes(
    nodes: list[NodeResource], config: GraphConfig, classifier: RoleClassifier
) -> tuple[list[GraphNode], str | None]:
    """Build master/minion graph nodes.

    Returns:
        The graph nodes in resource order and the id of the master, if any
    """
    master = None
    infra = []
    for node in nodes:
        graph_node = GraphNode(
            id=node.name,
            type="Node",
            size=config.minion_size,
            text=node.name,
            color=node.name,
            status=STATUS_OK if node.ready else STATUS_PULSE,
        )

        if classifier.is_master(node):
            graph_node.type = "Master"
            graph_node.size = config.master_size
            if master is None:
                master = node.name
            else:
                logger.warning(
                    f"Node {node.name} also classified as master by '{classifier.name}', "
                    f"linking it to {master}"
                )

        infra.append(graph_node)

    if master is None:
        warning = IncompleteGraph(
            "Could not identify master node. Please check if k8s update was a breaking change.",
            f"Role classifier '{classifier.name}' matched none of {len(nodes)} nodes",
        )
        logger.warning(warning.format_message())

    return infra, master


def build_dummy_nodes(taken: set[str], real_count: int, config: GraphConfig) -> list[GraphNode]:
    """Pad the infra node count up to ``config.dummy_nodes``."""
    dummies = []
    index = 0
    while real_count + len(dummies) < config.dummy_nodes:
        dummy_id = f"dummy{index}"
        index += 1
        if dummy_id in taken:
            continue
        dummies.append(
            GraphNode(id=dummy_id, type="Node", size=config.minion_size, color=DUMMY_COLOR)
        )
    return dummies


def build_pod_node(pod: PodResource, config: GraphConfig) -> GraphNode:
    """Build the graph node of a pod."""
    if not pod.container_statuses:
        logger.debug(f"Pod {pod.name} reports no container statuses, restarts counted as 0")

    return GraphNode(
        id=pod.name,
        type="Pod",
        size=config.pod_size,
        text=pod.name,
        color=pod.group,
        status=pod_status(pod),
        restarts=pod.restart_count,
        containers=pod.container_statuses or [],
    )


def build_graph(
    nodes: list[NodeResource],
    pods: list[PodResource],
    config: GraphConfig,
    classifier: RoleClassifier | None = None,
) -> GraphSnapshot:
    """Reconcile node and pod resources into one graph snapshot.

    Args:
        nodes: Cluster nodes in API order
        pods: Pods of the selected namespace in API order
        config: Size and link length settings
        classifier: Master detection strategy, taint presence by default

    Returns:
        Snapshot with infra nodes, dummy nodes and pods, pod->node links and
        node->master links
    """
    if classifier is None:
        classifier = TaintRoleClassifier()

    infra, master = build_infra_nodes(nodes, config, classifier)
    taken = {n.id for n in infra} | {pod.name for pod in pods}
    dummies = build_dummy_nodes(taken, len(infra), config)
    pod_nodes = [build_pod_node(pod, config) for pod in pods]

    links = [
        GraphLink(
            source=pod.name,
            target=pod.node_name,
            length=config.link_size_pod_to_minion,
            dotted=True,
        )
        for pod in pods
    ]

    if master is not None:
        for node in infra + dummies:
            if node.id == master:
                continue
            links.append(
                GraphLink(
                    source=node.id,
                    target=master,
                    length=config.link_size_minion_to_master,
                    dotted=False,
                )
            )

    snapshot = GraphSnapshot(nodes=infra + dummies + pod_nodes, links=links)
    snapshot._master = master

    logger.debug(
        f"Built graph: {len(infra)} nodes, {len(dummies)} dummy nodes, "
        f"{len(pod_nodes)} pods, {len(links)} links"
    )
    return snapshot
