"""Custom exceptions for kube-graph."""


class KubeGraphError(Exception):
    """Base exception for all kube-graph errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class UpstreamUnreachable(KubeGraphError):
    """Exception raised when the cluster API cannot be reached."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Request to k8s failed.\nError message: {reason}", f"URL: {url}")


class MalformedResponse(KubeGraphError):
    """Exception raised when a cluster API response cannot be parsed.

    The full response body is kept on ``raw_body``; the message only embeds
    the first ``max_body`` characters of it.
    """

    def __init__(
        self,
        url: str,
        reason: str,
        raw_body: str,
        status_code: int | None = None,
        max_body: int = 2000,
    ):
        self.url = url
        self.reason = reason
        self.raw_body = raw_body
        self.status_code = status_code

        body = raw_body
        if len(body) > max_body:
            body = f"{body[:max_body]}... [{len(raw_body) - max_body} more characters]"

        message = (
            "Unable to parse and extract information from k8s response.\n"
            f"Error message: {reason}\n"
            "--- response from k8s API call ---\n"
            f"{body}\n"
            "--- response end ---\n"
        )
        details = f"URL: {url}"
        if status_code is not None:
            details += f" (HTTP {status_code})"
        super().__init__(message, details)


class IncompleteGraph(KubeGraphError):
    """Soft failure: the graph is valid but materially incomplete.

    Never raised by the graph builder; it is formatted and logged as a warning.
    """

    pass


class ConfigurationError(KubeGraphError):
    """Exception raised for configuration errors."""

    pass
