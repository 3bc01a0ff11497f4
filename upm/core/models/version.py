"""
Version model — what a backend reports about itself.

Package managers do not agree on a versioning scheme, so a Version
keeps the raw text and only flags whether it happens to be SemVer.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, computed_field

_SEMVER_RE = re.compile(
    r"^(\d+)\.(\d+)\.(\d+)"
    r"(?:-([\dA-Za-z-]+(?:\.[\dA-Za-z-]+)*))?"
    r"(?:\+([\dA-Za-z-]+(?:\.[\dA-Za-z-]+)*))?$"
)

# First token that starts with a digit and contains a dot, e.g. "6.0.2" or "23.3.1-r0"
_TOKEN_RE = re.compile(r"\bv?(\d+(?:\.[\dA-Za-z+-]+)+)")


def is_semantic(representation: str) -> bool:
    """Check if a version string follows Semantic Versioning 2.0.0."""
    return _SEMVER_RE.match(representation) is not None


class Version(BaseModel):
    """A version string, semantic or not."""

    representation: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def semantic(self) -> bool:
        return is_semantic(self.representation)

    @classmethod
    def parse(cls, output: str) -> Version | None:
        """Pull the first version-looking token out of a tool's output.

        ``pacman --version`` prints a banner, ``npm --version`` a bare
        number; both end up as the number.
        """
        match = _TOKEN_RE.search(output)
        if match is None:
            return None
        return cls(representation=match.group(1))

    def core(self) -> tuple[int, int, int] | None:
        """The (major, minor, patch) triple of a semantic version."""
        match = _SEMVER_RE.match(self.representation)
        if match is None:
            return None
        return int(match.group(1)), int(match.group(2)), int(match.group(3))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        if self.semantic != other.semantic:
            return False
        if self.semantic:
            return self.core() == other.core()
        return self.representation == other.representation

    def __hash__(self) -> int:
        return hash(self.core() if self.semantic else self.representation)

    def __str__(self) -> str:
        return self.representation
