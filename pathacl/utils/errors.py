"""Custom exceptions used across pathacl."""
from __future__ import annotations


class PathAclError(Exception):
    """Base exception for all package-specific errors."""


class ConfigurationError(PathAclError):
    """Raised when configuration loading or validation fails."""


class PermissionTreeError(PathAclError):
    """Raised when the permission tree rejects an operation."""


class InvalidTimeError(PermissionTreeError):
    """Raised when access is checked at the reserved instant zero."""

    def __init__(self, message: str = "check time must not be zero") -> None:
        super().__init__(message)


class ZeroExpirationError(PermissionTreeError):
    """Raised when a grant carries a zero expiration."""

    def __init__(self, message: str = "zero expiration") -> None:
        super().__init__(message)


class GrantNotExtendingError(PermissionTreeError):
    """Raised when a grant would shorten an existing grant."""

    def __init__(self, principal: str, current: int, requested: int) -> None:
        super().__init__(
            f"existing grant for {principal} has longer validity than new grant "
            f"({current} > {requested})"
        )
        self.principal = principal
        self.current = current
        self.requested = requested


class SecurityError(PathAclError):
    """Raised when security policies are violated."""


class UnauthorizedError(SecurityError):
    """Raised when the caller lacks the access an operation requires."""

    def __init__(self, caller: str, action: str) -> None:
        super().__init__(f"the sender {caller} has no access to {action}")
        self.caller = caller
        self.action = action


class PathTooLongError(SecurityError):
    """Raised when a path exceeds the configured depth or segment limits."""


class DocumentError(PathAclError):
    """Raised when a sub-document cannot be embedded safely."""


class UnsafeFragmentError(DocumentError):
    """Raised for fragments that could escape their nesting position."""

    def __init__(self, message: str = "possible JSON injection attempt") -> None:
        super().__init__(message)


class UnsafeKeyError(DocumentError):
    """Raised for path keys that cannot be quoted verbatim."""

    def __init__(self, key: str) -> None:
        super().__init__(f"invalid path key: {key!r}")
        self.key = key


__all__ = [
    "PathAclError",
    "ConfigurationError",
    "PermissionTreeError",
    "InvalidTimeError",
    "ZeroExpirationError",
    "GrantNotExtendingError",
    "SecurityError",
    "UnauthorizedError",
    "PathTooLongError",
    "DocumentError",
    "UnsafeFragmentError",
    "UnsafeKeyError",
]
