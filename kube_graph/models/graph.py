"""Graph entities broadcast to viewers."""

from typing import Any, Literal

from pydantic import BaseModel, Field, PrivateAttr

NodeType = Literal["Master", "Node", "Pod"]

# Infra node status
STATUS_PULSE = "pulse"
STATUS_OK = ""

# Pod status, in classification priority order
POD_STATUS_DELETE = "delete"
POD_STATUS_START = "start"
POD_STATUS_NOT_READY = "notReady"
POD_STATUS_READY = "ready"

DUMMY_COLOR = "dummy"


class GraphNode(BaseModel):
    """A vertex of the graph: master, node or pod."""

    id: str
    type: NodeType
    size: int
    text: str | None = None
    color: str | None = None
    status: str | None = None
    restarts: int | None = None
    containers: list[dict[str, Any]] | None = None


class GraphLink(BaseModel):
    """An edge of the graph."""

    source: str
    target: str | None
    length: int
    dotted: bool


class GraphSnapshot(BaseModel):
    """One complete graph produced by a single poll cycle."""

    nodes: list[GraphNode] = Field(default_factory=list)
    links: list[GraphLink] = Field(default_factory=list)
    _master: str | None = PrivateAttr(default=None)

    @property
    def master(self) -> str | None:
        """Id of the identified master node, if any."""
        return self._master

    def node(self, node_id: str) -> GraphNode | None:
        """Look up a node by id."""
        return next((n for n in self.nodes if n.id == node_id), None)

    def to_payload(self) -> dict:
        """Wire representation of the ``update`` event."""
        return {
            "nodes": [n.model_dump(exclude_none=True) for n in self.nodes],
            "links": [link.model_dump() for link in self.links],
        }
