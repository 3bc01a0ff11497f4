"""
Built-in backend table — the package managers upm knows out of the box.

Order matters: it is the registry order, and therefore the order in
which active backends are translated, dispatched and reported.
System package managers come first, language package managers after.

All templates are non-interactive (``-y``, ``--noconfirm``): children
run with stdin closed and several of them may run at once.
"""

from __future__ import annotations

from upm.core.models.action import Action
from upm.core.models.backend import (
    PLACEHOLDER,
    Arity,
    BackendDescriptor,
    CommandTemplate,
    PackagePolicy,
)


def _many(*args: str, privileged: bool | None = None) -> CommandTemplate:
    return CommandTemplate(args=(*args, PLACEHOLDER), arity=Arity.MANY, privileged=privileged)


def _one(*args: str, privileged: bool | None = None) -> CommandTemplate:
    return CommandTemplate(args=(*args, PLACEHOLDER), arity=Arity.ONE, privileged=privileged)


def _bare(*args: str, privileged: bool | None = None) -> CommandTemplate:
    return CommandTemplate(args=args, arity=Arity.NONE, privileged=privileged)


# ── System package managers ─────────────────────────────────────


PACMAN = BackendDescriptor(
    name="pacman",
    description="Arch Linux package manager",
    privilege=True,
    actions={
        Action.INSTALL: _many("-S", "--noconfirm", "--needed"),
        Action.REMOVE: _many("-Rns", "--noconfirm"),
        Action.UPDATE: _bare("-Syu", "--noconfirm"),
        Action.SEARCH: _many("-Ss", privileged=False),
        Action.LIST: _bare("-Q", privileged=False),
    },
    aliases={"python3": "python", "pip3": "python-pip"},
)

APT = BackendDescriptor(
    name="apt",
    executable="apt-get",
    description="Debian/Ubuntu package manager",
    privilege=True,
    actions={
        Action.INSTALL: _many("install", "-y"),
        Action.REMOVE: _many("remove", "-y"),
        Action.UPDATE: _bare("upgrade", "-y"),
    },
    aliases={"pip3": "python3-pip"},
)

DNF = BackendDescriptor(
    name="dnf",
    description="Fedora/RHEL package manager",
    privilege=True,
    actions={
        Action.INSTALL: _many("install", "-y"),
        Action.REMOVE: _many("remove", "-y"),
        Action.UPDATE: _bare("upgrade", "-y"),
        Action.SEARCH: _many("search", privileged=False),
        Action.LIST: _bare("list", "--installed", privileged=False),
    },
    aliases={"pip3": "python3-pip"},
)

ZYPPER = BackendDescriptor(
    name="zypper",
    description="openSUSE package manager",
    privilege=True,
    actions={
        Action.INSTALL: _many("--non-interactive", "install"),
        Action.REMOVE: _many("--non-interactive", "remove"),
        Action.UPDATE: _bare("--non-interactive", "update"),
        Action.SEARCH: _many("search", privileged=False),
        Action.LIST: _bare("search", "--installed-only", privileged=False),
    },
)

APK = BackendDescriptor(
    name="apk",
    description="Alpine Linux package manager",
    privilege=True,
    actions={
        Action.INSTALL: _many("add"),
        Action.REMOVE: _many("del"),
        Action.UPDATE: _bare("upgrade"),
        Action.SEARCH: _many("search", privileged=False),
        Action.LIST: _bare("info", privileged=False),
    },
)

BREW = BackendDescriptor(
    name="brew",
    description="Homebrew",
    actions={
        Action.INSTALL: _many("install"),
        Action.REMOVE: _many("uninstall"),
        Action.UPDATE: _bare("upgrade"),
        Action.SEARCH: _one("search"),
        Action.LIST: _bare("list"),
    },
)

FLATPAK = BackendDescriptor(
    name="flatpak",
    description="Flatpak applications",
    actions={
        Action.INSTALL: _many("install", "-y", "--noninteractive"),
        Action.REMOVE: _many("uninstall", "-y", "--noninteractive"),
        Action.UPDATE: _bare("update", "-y", "--noninteractive"),
        Action.SEARCH: _one("search"),
        Action.LIST: _bare("list", "--app"),
    },
)

SNAP = BackendDescriptor(
    name="snap",
    description="Snap packages",
    privilege=True,
    actions={
        Action.INSTALL: _many("install"),
        Action.REMOVE: _many("remove"),
        Action.UPDATE: _bare("refresh"),
        Action.SEARCH: _one("find", privileged=False),
        Action.LIST: _bare("list", privileged=False),
    },
)


# ── Language package managers ───────────────────────────────────


NPM = BackendDescriptor(
    name="npm",
    description="Node.js global packages",
    actions={
        Action.INSTALL: _many("install", "--global"),
        Action.REMOVE: _many("uninstall", "--global"),
        Action.UPDATE: _many("update", "--global"),
        Action.SEARCH: _many("search"),
        Action.LIST: _bare("ls", "--global", "--depth=0"),
    },
)

PIP = BackendDescriptor(
    name="pip",
    executable="pip3",
    description="Python packages (user site)",
    actions={
        Action.INSTALL: _many("install", "--user"),
        Action.REMOVE: _many("uninstall", "-y"),
        Action.LIST: _bare("list"),
    },
)

GEM = BackendDescriptor(
    name="gem",
    description="Ruby gems",
    actions={
        Action.INSTALL: _many("install", "--user-install"),
        Action.REMOVE: _many("uninstall", "-x"),
        Action.UPDATE: _many("update", "--user-install"),
        Action.SEARCH: _one("search", "--remote"),
        Action.LIST: _bare("list", "--local"),
    },
)

CARGO = BackendDescriptor(
    name="cargo",
    description="Rust crates (binaries)",
    package_policy=PackagePolicy.PER_PACKAGE,
    actions={
        Action.INSTALL: _many("install"),
        Action.REMOVE: _many("uninstall"),
        Action.SEARCH: _one("search"),
        Action.LIST: _bare("install", "--list"),
    },
)


BUILTIN_BACKENDS: tuple[BackendDescriptor, ...] = (
    PACMAN,
    APT,
    DNF,
    ZYPPER,
    APK,
    BREW,
    FLATPAK,
    SNAP,
    NPM,
    PIP,
    GEM,
    CARGO,
)
