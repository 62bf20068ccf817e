"""Live Kubernetes node/pod graph for connected viewers."""

__version__ = "0.1.0"
