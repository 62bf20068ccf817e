"""Cluster API resources as consumed by the graph builder."""

from typing import Any

from pydantic import BaseModel, Field


class Condition(BaseModel):
    """A status condition of a node or pod."""

    type: str
    status: str | None = None


class NodeResource(BaseModel):
    """Kubernetes node as returned by the nodes endpoint."""

    name: str
    conditions: list[Condition] | None = None
    taints: list[dict[str, Any]] | None = None
    labels: dict[str, str] = Field(default_factory=dict)

    @property
    def ready(self) -> bool:
        """True only when a Ready condition reports status True."""
        for condition in self.conditions or []:
            if condition.type == "Ready":
                return condition.status == "True"
        return False

    @classmethod
    def from_api_item(cls, item: dict) -> "NodeResource":
        """Parse one entry of a NodeList ``items`` array."""
        metadata = item.get("metadata") or {}
        spec = item.get("spec") or {}
        status = item.get("status") or {}
        return cls(
            name=metadata["name"],
            conditions=status.get("conditions"),
            taints=spec.get("taints"),
            labels=metadata.get("labels") or {},
        )


class PodResource(BaseModel):
    """Kubernetes pod as returned by the namespaced pods endpoint."""

    name: str
    deletion_timestamp: str | None = None
    phase: str | None = None
    conditions: list[Condition] | None = None
    container_statuses: list[dict[str, Any]] | None = None
    node_name: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)

    @property
    def restart_count(self) -> int:
        """Sum of restarts over all containers; zero without container data."""
        return sum(c.get("restartCount") or 0 for c in self.container_statuses or [])

    @property
    def group(self) -> str | None:
        """Grouping key: the ``app`` label, else the ``run`` label."""
        if "app" in self.labels:
            return self.labels["app"]
        return self.labels.get("run")

    @property
    def ready_condition_false(self) -> bool:
        """True when a Ready condition explicitly reports False."""
        return any(c.type == "Ready" and c.status == "False" for c in self.conditions or [])

    @classmethod
    def from_api_item(cls, item: dict) -> "PodResource":
        """Parse one entry of a PodList ``items`` array."""
        metadata = item.get("metadata") or {}
        spec = item.get("spec") or {}
        status = item.get("status") or {}
        return cls(
            name=metadata["name"],
            deletion_timestamp=metadata.get("deletionTimestamp"),
            phase=status.get("phase"),
            conditions=status.get("conditions"),
            container_statuses=status.get("containerStatuses"),
            node_name=spec.get("nodeName"),
            labels=metadata.get("labels") or {},
        )


def parse_items(payload: Any) -> list[dict]:
    """Return the ``items`` array of a list response.

    Raises:
        ValueError: If the payload is not a list response
    """
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    if payload.get("kind") == "Status":
        raise ValueError(f"API returned status: {payload.get('message') or payload.get('reason')}")
    items = payload.get("items")
    if not isinstance(items, list):
        raise ValueError("response has no 'items' list")
    return items


def parse_node_list(payload: Any) -> list[NodeResource]:
    """Parse a NodeList response.

    Raises:
        ValueError: If the payload or one of its items has an unexpected shape
    """
    return [NodeResource.from_api_item(_as_item(item)) for item in parse_items(payload)]


def parse_pod_list(payload: Any) -> list[PodResource]:
    """Parse a PodList response.

    Raises:
        ValueError: If the payload or one of its items has an unexpected shape
    """
    return [PodResource.from_api_item(_as_item(item)) for item in parse_items(payload)]


def parse_namespace_list(payload: Any) -> list[str]:
    """Parse a NamespaceList response into namespace names."""
    return [_item_name(_as_item(item)) for item in parse_items(payload)]


def _as_item(item: Any) -> dict:
    if not isinstance(item, dict):
        raise ValueError(f"list item is not an object: {item!r}")
    if not _item_name(item):
        raise ValueError("list item has no metadata.name")
    for section in ("spec", "status"):
        if not isinstance(item.get(section) or {}, dict):
            raise ValueError(f"{section} of {_item_name(item)} is not an object")
    if not isinstance(item["metadata"].get("labels") or {}, dict):
        raise ValueError(f"metadata.labels of {_item_name(item)} is not an object")
    return item


def _item_name(item: dict) -> str | None:
    metadata = item.get("metadata")
    if not isinstance(metadata, dict):
        return None
    return metadata.get("name")
