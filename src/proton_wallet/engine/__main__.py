"""``python -m proton_wallet.engine``: engine process entry point."""

from __future__ import annotations

import asyncio
import logging
import sys

from proton_wallet.config.settings import AppSettings
from proton_wallet.engine.host import EngineHost
from proton_wallet.errors.proton_errors import BackendError
from proton_wallet.logging_setup import configure_logging
from proton_wallet.relay.stdio import StdioChannel
from proton_wallet.utils.imports import load_object

logger = logging.getLogger(__name__)


def main() -> int:
    settings = AppSettings()
    configure_logging(settings.log_dir, "engine", settings.log_level)
    try:
        backend_factory = load_object(settings.engine.backend)
    except BackendError:
        logger.exception("Cannot load wallet backend %r", settings.engine.backend)
        return 1
    return asyncio.run(EngineHost(StdioChannel(), backend_factory).run())


if __name__ == "__main__":
    sys.exit(main())
