"""ProtonError: base exception class for all py-proton errors."""

from __future__ import annotations


class ProtonError(Exception):
    """Base error for all wallet shell operations.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code string.
    """

    def __init__(self, message: str, *, code: str = "proton-error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigError(ProtonError):
    """Error reading or writing persisted settings."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="config-error")


class RelayError(ProtonError):
    """Error in the engine <-> UI message relay."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="relay-error")


class ProcessError(ProtonError):
    """Error creating or controlling a child process."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="process-error")


class BackendError(ProtonError):
    """Error raised by, or while loading, a wallet backend."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="backend-error")
