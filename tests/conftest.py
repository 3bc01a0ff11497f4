"""
Shared test fixtures and configuration.
"""

import os
import stat
import sys
import textwrap
from pathlib import Path

import pytest

from upm.core.models.action import Action
from upm.core.models.backend import PLACEHOLDER, Arity, BackendDescriptor, CommandTemplate


@pytest.fixture
def make_backend():
    """Build a descriptor from ``action=[args...]`` keywords.

    Plain argument lists become arity-many templates with the package
    placeholder appended; pass a CommandTemplate for anything else.
    """

    def make(name: str, *, executable: str = "", **kwargs) -> BackendDescriptor:
        actions = {}
        fields = {}
        for key, value in kwargs.items():
            if key in {a.value for a in Action}:
                if isinstance(value, CommandTemplate):
                    actions[Action(key)] = value
                else:
                    actions[Action(key)] = CommandTemplate(
                        args=(*value, PLACEHOLDER), arity=Arity.MANY,
                    )
            else:
                fields[key] = value
        return BackendDescriptor(name=name, executable=executable, actions=actions, **fields)

    return make


@pytest.fixture
def py_command():
    """Argument vector running a snippet with this Python interpreter."""

    def make(code: str, *args: str) -> tuple[str, ...]:
        return (sys.executable, "-c", textwrap.dedent(code), *args)

    return make


@pytest.fixture
def fake_bin(tmp_path: Path):
    """Factory for executable ``#!/bin/sh`` stubs in a private bin dir.

    Returns ``(bin_dir, make)``; ``make(name, body)`` writes the stub.
    """
    if os.name != "posix":
        pytest.skip("shell stubs need a POSIX shell")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def make(name: str, body: str = "exit 0") -> Path:
        script = bin_dir / name
        script.write_text("#!/bin/sh\n" + textwrap.dedent(body).strip() + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return bin_dir, make
