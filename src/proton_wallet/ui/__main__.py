"""``python -m proton_wallet.ui``: UI process entry point."""

from __future__ import annotations

import asyncio
import logging
import sys

from proton_wallet.config.settings import AppSettings
from proton_wallet.errors.proton_errors import BackendError
from proton_wallet.logging_setup import configure_logging
from proton_wallet.metrics.collector import ShellMetrics
from proton_wallet.relay.stdio import StdioChannel
from proton_wallet.ui.host import UIHost
from proton_wallet.utils.imports import load_object

logger = logging.getLogger(__name__)


def main() -> int:
    settings = AppSettings()
    configure_logging(settings.log_dir, "ui", settings.log_level)
    try:
        renderer_factory = load_object(settings.ui.renderer)
    except BackendError:
        logger.exception("Cannot load renderer %r", settings.ui.renderer)
        return 1
    host = UIHost(
        StdioChannel(),
        renderer_factory(),
        price_config=settings.price,
        metrics=ShellMetrics(),
    )
    return asyncio.run(host.run())


if __name__ == "__main__":
    sys.exit(main())
