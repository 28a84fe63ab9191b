"""Toolchain Setup — cached toolchain installation for two-phase CI steps."""

__version__ = "0.1.0"
