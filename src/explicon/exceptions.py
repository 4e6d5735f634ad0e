from __future__ import annotations


class ExpliconError(RuntimeError):
    """Base sourced value resolution error."""


class VarLookupFailed(ExpliconError):
    """Raised when the referenced environment variable cannot be read."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Error while resolving env var: {reason}")
        self.name = name
        self.reason = reason


class ResolveError(ExpliconError):
    """Raised when a value was read but could not be turned into the target."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ParseFailed(ResolveError):
    """Raised when environment text does not parse as the target type."""


class ValidationFailed(ResolveError):
    """Raised when a resolved value is rejected by a caller predicate."""

    def __init__(self, message: str = "Validation failed") -> None:
        super().__init__(message)


Other = ResolveError

__all__ = [
    "ExpliconError",
    "Other",
    "ParseFailed",
    "ResolveError",
    "ValidationFailed",
    "VarLookupFailed",
]
