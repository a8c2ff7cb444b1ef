class MetricsException(Exception):
    """Base exception for all metrics-related errors."""
    pass

class ConfigurationException(MetricsException):
    """Raised when required input or credentials are missing or malformed."""
    pass

class GitHubApiException(MetricsException):
    """Raised when the GitHub REST API answers with a non-success status."""
    def __init__(self, status: int, reason: str = "", body: str = ""):
        self.status = status
        self.reason = reason
        self.body = body
        super().__init__(f"GitHub API error: {status} {reason} - {body}")
