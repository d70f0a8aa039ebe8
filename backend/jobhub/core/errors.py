from __future__ import annotations


class JobHubError(Exception):
    """Base class for errors raised by the aggregation pipeline."""


class ConfigurationError(JobHubError):
    """A provider is disabled because its credentials are missing."""

    def __init__(self, source: str, message: str | None = None):
        self.source = source
        super().__init__(message or f"{source} is not configured")


class ProviderFetchError(JobHubError):
    """Network, HTTP or payload failure while querying one provider."""

    def __init__(self, source: str, message: str, status_code: int | None = None):
        self.source = source
        self.status_code = status_code
        super().__init__(f"{source}: {message}")


class PersistenceError(JobHubError):
    """Write-through into the jobs table failed."""


class JobValidationError(JobHubError):
    """A user-submitted job is missing required fields."""
