"""Universal package manager — one vocabulary over many package managers."""

__version__ = "0.1.0"
