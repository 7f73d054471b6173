"""py-proton: desktop wallet shell for a privileged wallet engine process."""

__version__ = "0.1.0"
