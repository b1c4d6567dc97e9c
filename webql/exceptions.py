"""Exception hierarchy for the resolution engine.

Resolver and delegate failures are not wrapped: whatever a resolver raises
propagates out of ``WebQL.call`` unchanged. The classes here cover the
engine's own failure modes.
"""


class WebQLError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidQueryError(WebQLError):
    """Raised when a query or step has an unsupported shape."""

    def __init__(self, message: str, step: object | None = None) -> None:
        super().__init__(message)
        self.step = step


class DelegateResponseError(WebQLError):
    """Raised when the delegate settles to something other than a mapping."""


class ConfigurationError(WebQLError):
    """Raised when configuration files are missing or invalid."""
