"""Outbound requests to the cluster API."""

import asyncio
import json
from collections.abc import Callable
from typing import Any

import requests

from kube_graph.config import GraphConfig
from kube_graph.exceptions import MalformedResponse, UpstreamUnreachable
from kube_graph.logging_config import get_logger
from kube_graph.models.resources import (
    NodeResource,
    PodResource,
    parse_namespace_list,
    parse_node_list,
    parse_pod_list,
)

logger = get_logger(__name__)


class ResourceFetcher:
    """Fetches namespace, pod and node lists from the cluster API.

    No retries and no caching: a failed request surfaces as
    ``UpstreamUnreachable`` or ``MalformedResponse`` and the caller decides.
    """

    def __init__(self, config: GraphConfig, session: requests.Session | None = None):
        """Initialize the fetcher.

        Args:
            config: Endpoint URLs and request timeout
            session: Optional pre-configured requests session
        """
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()

    def get(self, url: str) -> tuple[str, int]:
        """Issue a blocking GET and return the full body and status code.

        Raises:
            UpstreamUnreachable: On connection, DNS or timeout failures
        """
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.config.request_timeout_secs)
        except requests.RequestException as e:
            logger.debug(f"Request to {url} failed: {e}")
            raise UpstreamUnreachable(url, str(e))

        response.encoding = response.encoding or "utf-8"
        return response.text, response.status_code

    async def fetch_json(self, url: str) -> Any:
        """GET ``url`` without blocking the event loop and parse the body as JSON.

        Raises:
            UpstreamUnreachable: On transport failures
            MalformedResponse: If the body is not valid JSON
        """
        payload, _, _ = await self._read_json(url)
        return payload

    async def fetch_pods(self, namespace: str) -> list[PodResource]:
        """Fetch the pods of one namespace."""
        return await self._fetch_list(self.config.pods_url(namespace), parse_pod_list)

    async def fetch_nodes(self) -> list[NodeResource]:
        """Fetch all cluster nodes."""
        return await self._fetch_list(self.config.nodes_api_url, parse_node_list)

    async def fetch_namespaces(self) -> list[str]:
        """Fetch the names of all namespaces."""
        return await self._fetch_list(self.config.namespaces_url, parse_namespace_list)

    async def _fetch_list(self, url: str, parse: Callable[[Any], list]) -> list:
        payload, body, status_code = await self._read_json(url)
        try:
            result = parse(payload)
        except ValueError as e:
            raise self._malformed(url, e, body, status_code)

        logger.debug(f"Fetched {len(result)} items from {url}")
        return result

    async def _read_json(self, url: str) -> tuple[Any, str, int]:
        body, status_code = await asyncio.to_thread(self.get, url)
        try:
            return json.loads(body), body, status_code
        except ValueError as e:
            raise self._malformed(url, e, body, status_code)

    def _malformed(
        self, url: str, error: Exception, body: str, status_code: int | None
    ) -> MalformedResponse:
        exc = MalformedResponse(
            url, str(error), body, status_code=status_code, max_body=self.config.max_logged_body
        )
        logger.debug(f"Malformed response from {url}: {error}")
        return exc
