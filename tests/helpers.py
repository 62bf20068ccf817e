"""Builders for cluster API payloads and a scripted fetcher."""

import asyncio

from kube_graph.exceptions import KubeGraphError
from kube_graph.models.resources import parse_namespace_list, parse_node_list, parse_pod_list


def node_item(name, ready=True, taints=None, labels=None, conditions=True):
    """A NodeList item as served by /api/v1/nodes."""
    item = {"metadata": {"name": name}, "spec": {}, "status": {}}
    if labels is not None:
        item["metadata"]["labels"] = labels
    if taints is not None:
        item["spec"]["taints"] = taints
    if conditions:
        item["status"]["conditions"] = [
            {"type": "MemoryPressure", "status": "False"},
            {"type": "Ready", "status": "True" if ready else "False"},
        ]
    return item


def pod_item(
    name,
    node_name="n1",
    phase="Running",
    deletion_timestamp=None,
    ready=True,
    restarts=(0,),
    labels=None,
):
    """A PodList item as served by /api/v1/namespaces/{ns}/pods."""
    item = {
        "metadata": {"name": name, "labels": labels if labels is not None else {"app": name}},
        "spec": {},
        "status": {"phase": phase},
    }
    if node_name is not None:
        item["spec"]["nodeName"] = node_name
    if deletion_timestamp is not None:
        item["metadata"]["deletionTimestamp"] = deletion_timestamp
    if ready is not None:
        item["status"]["conditions"] = [{"type": "Ready", "status": "True" if ready else "False"}]
    if restarts is not None:
        item["status"]["containerStatuses"] = [
            {"name": f"c{i}", "restartCount": count, "ready": bool(ready)}
            for i, count in enumerate(restarts)
        ]
    return item


def item_list(kind, *items):
    return {"kind": kind, "apiVersion": "v1", "items": list(items)}


def namespace_list(*names):
    return item_list("NamespaceList", *({"metadata": {"name": name}} for name in names))


class FakeFetcher:
    """Stands in for ResourceFetcher with canned payloads.

    ``pods`` maps namespace -> PodList payload. Any payload may instead be a
    KubeGraphError instance, which is raised when requested. If ``gate`` is
    set, pod fetches wait on it before returning.
    """

    def __init__(self, nodes=None, pods=None, namespaces=None, gate=None):
        self.nodes = nodes if nodes is not None else item_list("NodeList")
        self.pods = pods or {}
        self.namespaces = namespaces if namespaces is not None else namespace_list("default")
        self.gate = gate
        self.calls = []
        self.closed = False

    async def fetch_pods(self, namespace):
        self.calls.append(("pods", namespace))
        if self.gate is not None:
            await self.gate.wait()
        return parse_pod_list(self._payload(self.pods.get(namespace, item_list("PodList"))))

    async def fetch_nodes(self):
        self.calls.append(("nodes", None))
        return parse_node_list(self._payload(self.nodes))

    async def fetch_namespaces(self):
        self.calls.append(("namespaces", None))
        return parse_namespace_list(self._payload(self.namespaces))

    def close(self):
        self.closed = True

    def _payload(self, payload):
        if isinstance(payload, KubeGraphError):
            raise payload
        return payload


async def settle(poll_loop):
    """Wait for every in-flight cycle of a poll loop."""
    while poll_loop.in_flight:
        await asyncio.sleep(0)
