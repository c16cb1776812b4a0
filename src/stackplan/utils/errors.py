"""Custom exception classes for stackplan."""


class StackPlanError(Exception):
    """Base exception for all stackplan errors."""
    pass


class ConfigurationError(StackPlanError):
    """Raised when resource declarations cannot form a valid graph."""
    pass


class CyclicDependencyError(ConfigurationError):
    """Raised when declared dependencies contain a cycle."""

    def __init__(self, cycle):
        self.cycle = list(cycle)
        super().__init__(f"Cyclic dependency between resources: {' -> '.join(self.cycle + self.cycle[:1])}")


class UnresolvedReferenceError(ConfigurationError):
    """Raised when a resource references an id that is not declared."""

    def __init__(self, source_id: str, missing_id: str):
        self.source_id = source_id
        self.missing_id = missing_id
        super().__init__(f"Resource '{source_id}' references undeclared resource '{missing_id}'")


class DeclarationLoadError(StackPlanError):
    """Raised when a declarations file cannot be loaded or is invalid."""
    pass


class ConfigError(StackPlanError):
    """Raised when configuration is invalid or missing."""
    pass


class ProviderError(StackPlanError):
    """Base class for errors returned by a cloud provider client."""
    pass


class TransientProviderError(ProviderError):
    """Raised for provider failures expected to clear on retry (throttling, lag)."""
    pass


class ProviderTimeoutError(TransientProviderError):
    """Raised when a provider call exceeds its bounded wait."""
    pass


class FatalProviderError(ProviderError):
    """Raised for validation or permission failures that retrying cannot fix."""
    pass


class ResourceNotFoundError(FatalProviderError):
    """Raised when the provider has no resource with the requested id."""
    pass


class StateStoreError(StackPlanError):
    """Raised when persisted state cannot be read or written."""
    pass
