"""Namespace selection shared by every connected viewer."""

from kube_graph.logging_config import get_logger

logger = get_logger(__name__)


class NamespaceRegistry:
    """Process-wide current namespace.

    There is a single selector for the whole process: a change requested by
    one viewer switches the namespace for all of them. The poll loop reads
    ``current`` once at the start of each cycle, so a change only affects the
    next cycle.
    """

    def __init__(self, default: str = "default"):
        self.default = default
        self._current = default
        self._known: list[str] = []

    @property
    def current(self) -> str:
        return self._current

    @property
    def known(self) -> list[str]:
        """Namespace names from the last successful namespace listing."""
        return list(self._known)

    def change(self, namespace) -> bool:
        """Select a new namespace.

        Returns:
            True if the selection was applied, False if the request was ignored
        """
        if not isinstance(namespace, str) or not namespace.strip():
            logger.warning(f"Ignoring namespace change to invalid value: {namespace!r}")
            return False

        namespace = namespace.strip()
        if namespace != self._current:
            logger.info(f"Namespace changed from {self._current} to {namespace}")
        self._current = namespace
        return True

    def update_known(self, names: list[str]) -> None:
        self._known = list(names)
        logger.debug(f"Known namespaces: {', '.join(self._known) or 'none'}")

    def next_known(self) -> str | None:
        """The known namespace after the current one, wrapping around."""
        if not self._known:
            return None
        if self._current not in self._known:
            return self._known[0]
        index = self._known.index(self._current)
        return self._known[(index + 1) % len(self._known)]
