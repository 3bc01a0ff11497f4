"""Static data shipped with upm — the built-in backend table."""

from upm.core.data.backends import BUILTIN_BACKENDS

__all__ = ["BUILTIN_BACKENDS"]
