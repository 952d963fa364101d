"""Render knowledge-base content into wiki pages through an IR, frontends and passes."""

__version__ = "0.1.0"