"""Error types for py-proton."""

from proton_wallet.errors.proton_errors import (
    BackendError,
    ConfigError,
    ProcessError,
    ProtonError,
    RelayError,
)

__all__ = ["BackendError", "ConfigError", "ProcessError", "ProtonError", "RelayError"]
