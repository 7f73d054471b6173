"""Shared error definitions."""

from __future__ import annotations

from proton_wallet.errors.proton_errors import (
    BackendError,
    ConfigError,
    ProcessError,
    RelayError,
)

# -- Config ----------------------------------------------------------------

ErrConfigNotLoaded = ConfigError("config has not been loaded")

# -- Relay -----------------------------------------------------------------

ErrUndecodableMessage = RelayError("relay line is not a valid message")

# -- Processes -------------------------------------------------------------

ErrProcessNotStarted = ProcessError("child process has not been started")

# -- Backend ---------------------------------------------------------------

ErrBadBackendPath = BackendError("backend path must look like 'package.module:attribute'")
