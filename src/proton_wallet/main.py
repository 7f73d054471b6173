"""Application entry point for py-proton."""

from __future__ import annotations

from proton_wallet.desktop.app import main as desktop_main


def main() -> None:
    """Start the supervisor process and its two children."""
    desktop_main()


if __name__ == "__main__":
    main()
