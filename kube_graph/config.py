"""Runtime configuration for the poll-transform-broadcast pipeline."""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ValidationError, field_validator

from kube_graph.exceptions import ConfigurationError
from kube_graph.logging_config import get_logger

logger = get_logger(__name__)

# Field name -> environment variable name
ENV_VARS = {
    "master_size": "masterSize",
    "minion_size": "minionSize",
    "pod_size": "podSize",
    "link_size_pod_to_minion": "linkSizePodToMinion",
    "link_size_minion_to_master": "linkSizeMinionToMaster",
    "dummy_nodes": "dummyNodes",
    "namespaces_url": "namespacesUrl",
    "nodes_api_url": "nodesApiUrl",
    "polling_interval_secs": "pollingIntervalInSeconds",
    "namespace": "namespace",
    "request_timeout_secs": "requestTimeoutSecs",
    "max_logged_body": "maxLoggedBody",
    "role_classifier": "roleClassifier",
    "skip_overlapping_ticks": "skipOverlappingTicks",
    "host": "host",
    "port": "port",
}

ROLE_CLASSIFIERS = ["taints", "labels"]


class GraphConfig(BaseModel):
    """Graph rendering hints, upstream endpoints and polling settings."""

    master_size: int = 15
    minion_size: int = 15
    pod_size: int = 15
    link_size_pod_to_minion: int = 150
    link_size_minion_to_master: int = 250
    dummy_nodes: int = 0
    namespaces_url: str = "http://127.0.0.1:8001/api/v1/namespaces/"
    nodes_api_url: str = "http://127.0.0.1:8001/api/v1/nodes"
    polling_interval_secs: float = 1
    namespace: str = "default"
    request_timeout_secs: float = 10
    max_logged_body: int = 2000
    role_classifier: str = "taints"
    skip_overlapping_ticks: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    @field_validator(
        "master_size",
        "minion_size",
        "pod_size",
        "link_size_pod_to_minion",
        "link_size_minion_to_master",
        "max_logged_body",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate sizes and lengths are positive."""
        if v <= 0:
            raise ValueError(f"must be positive, got {v}")
        return v

    @field_validator("dummy_nodes")
    @classmethod
    def validate_dummy_nodes(cls, v: int) -> int:
        """Validate dummy node count is not negative."""
        if v < 0:
            raise ValueError(f"dummy_nodes cannot be negative, got {v}")
        return v

    @field_validator("polling_interval_secs", "request_timeout_secs")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        """Validate intervals and timeouts are positive."""
        if v <= 0:
            raise ValueError(f"must be greater than zero, got {v}")
        return v

    @field_validator("namespaces_url")
    @classmethod
    def validate_namespaces_url(cls, v: str) -> str:
        """Validate namespaces_url is set and ends with a slash.

        Pod URLs are built as ``{namespaces_url}{namespace}/pods``.
        """
        if not v:
            raise ValueError("namespaces_url cannot be empty")
        if not v.endswith("/"):
            v = v + "/"
        return v

    @field_validator("nodes_api_url")
    @classmethod
    def validate_nodes_api_url(cls, v: str) -> str:
        """Validate nodes_api_url is not empty."""
        if not v:
            raise ValueError("nodes_api_url cannot be empty")
        return v

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Validate the default namespace is not blank."""
        if not v or not v.strip():
            raise ValueError("namespace cannot be empty")
        return v.strip()

    @field_validator("role_classifier")
    @classmethod
    def validate_role_classifier(cls, v: str) -> str:
        """Validate role_classifier is a known strategy."""
        if v not in ROLE_CLASSIFIERS:
            raise ValueError(f"role_classifier must be one of {ROLE_CLASSIFIERS}, got '{v}'")
        return v

    def pods_url(self, namespace: str) -> str:
        """Pod list URL for a namespace."""
        return f"{self.namespaces_url}{namespace}/pods"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> "GraphConfig":
        """Build configuration from environment variables.

        Unset variables keep their defaults; explicit ``overrides`` win over
        the environment.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        if environ is None:
            environ = os.environ

        values = {}
        for field, env_name in ENV_VARS.items():
            if env_name in environ:
                values[field] = environ[env_name]
        values.update({k: v for k, v in overrides.items() if v is not None})

        logger.debug(f"Configuration from environment: {sorted(values)}")
        return cls._validated(values, source="environment")

    def save(self, path: str) -> None:
        """Save configuration to YAML file."""
        import yaml

        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)

    @classmethod
    def load(cls, path: str, **overrides) -> "GraphConfig":
        """Load configuration from YAML file.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        import yaml

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                "Create it with 'kube-graph config-init' or pass settings as environment variables",
            )
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse configuration file: {path}", str(e))

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Invalid configuration file: {path}", "Expected a mapping of setting names to values"
            )

        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls._validated(data, source=path)

    @classmethod
    def _validated(cls, values: dict, source: str) -> "GraphConfig":
        try:
            return cls(**values)
        except ValidationError as e:
            problems = "\n".join(
                f"  - {'.'.join(str(x) for x in error['loc'])}: {error['msg']}"
                for error in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration from {source}", problems)
