"""Exception hierarchy for aoplog.

All framework-specific exceptions inherit from :class:`AopError`, making it
easy to catch any aoplog error with a single ``except AopError`` clause.
Failures raised by the intercepted implementation are never wrapped in
these types; they reach the caller unchanged.
"""

from typing import Any


class AopError(Exception):
    """Base exception for all aoplog errors."""

    pass


class BindingError(AopError):
    """Raised at bind time when a binding is misconfigured.

    Covers absent implementations, sinks or interceptors, interfaces that
    are not classes, and implementations missing an interface method.
    """

    def __init__(self, msg: str):
        super().__init__(msg)


class InvocationStateError(AopError):
    """Raised when an interceptor breaks the per-call contract.

    Examples are calling ``proceed`` twice or writing a return value
    after one was already recorded.
    """

    def __init__(self, msg: str):
        super().__init__(msg)


class ProviderNotFoundError(AopError):
    """Raised when the container has no binding for a requested interface.

    Attributes:
        key: The interface that was requested.
    """

    def __init__(self, key: Any):
        key_name = getattr(key, "__name__", str(key))
        super().__init__(f"No binding registered for interface '{key_name}'")
        self.key = key


class ComponentCreationError(AopError):
    """Raised when a binding's implementation factory fails.

    Attributes:
        key: The interface whose implementation could not be created.
        cause: The original exception that caused the failure.
    """

    def __init__(self, key: Any, cause: Exception):
        k = getattr(key, "__name__", key)
        super().__init__(f"Failed to create implementation for: {k}; cause: {cause.__class__.__name__}: {cause}")
        self.key = key
        self.cause = cause


class ConfigurationError(AopError):
    """Raised for configuration problems (invalid sources, bad values)."""

    def __init__(self, msg: str):
        super().__init__(msg)
