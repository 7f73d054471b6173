"""PySide6 implementations of the supervisor ports.

Everything in this package needs the ``desktop`` extra (PySide6).
"""
