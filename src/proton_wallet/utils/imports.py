"""Resolve ``package.module:attribute`` paths to objects."""

from __future__ import annotations

import importlib
from typing import Any

from proton_wallet.errors.definitions import ErrBadBackendPath
from proton_wallet.errors.proton_errors import BackendError


def load_object(path: str) -> Any:
    """Import *path* (``"package.module:attribute"``) and return the attribute.

    Raises:
        BackendError: If the path is malformed or cannot be resolved.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ErrBadBackendPath
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise BackendError(f"cannot import {module_name!r}: {exc}") from exc
    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise BackendError(f"{module_name!r} has no attribute {attr!r}") from exc
    return obj
