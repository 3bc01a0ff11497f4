"""
Privilege elevation — wrap an argument vector with sudo (or similar).

The escalation program owns the credential prompt. We only decide
whether to prefix, and with what.
"""

from __future__ import annotations

import os
from collections.abc import Sequence

DEFAULT_ESCALATION: tuple[str, ...] = ("sudo",)


def is_root() -> bool:
    """True when the process already has root privileges.

    Platforms without uids (Windows) never count as root here, and
    never get a prefix either: see ``elevate``.
    """
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def elevate(
    argv: Sequence[str],
    escalation: Sequence[str] = DEFAULT_ESCALATION,
) -> list[str]:
    """Return ``argv`` prefixed with the escalation command if needed."""
    if is_root() or not hasattr(os, "geteuid"):
        return list(argv)
    return [*escalation, *argv]
