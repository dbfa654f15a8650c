"""Cargo build profiles and their command-line arguments."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProfileKind(Enum):
    """The kind of cargo profile in use."""

    DEBUG = "debug"
    RELEASE = "release"
    NAMED = "named"


@dataclass(frozen=True)
class Profile:
    """A cargo profile: the built-in debug or release one, or a custom named one."""

    kind: ProfileKind
    name: str | None = None

    def __post_init__(self) -> None:
        if self.kind is ProfileKind.NAMED and self.name is None:
            raise ValueError("a named profile needs a name")
        if self.kind is not ProfileKind.NAMED and self.name is not None:
            raise ValueError(f"the {self.kind.value} profile takes no name")

    def __str__(self) -> str:
        if self.kind is ProfileKind.NAMED:
            return str(self.name)
        return self.kind.value

    def cargo_args(self) -> list[str]:
        """The arguments that select this profile on a cargo command line."""
        if self.kind is ProfileKind.RELEASE:
            return ["--release"]
        if self.kind is ProfileKind.NAMED:
            return [f"--profile={self.name}"]
        return []


def select_profile(is_release: bool, release: str | None, debug: str | None) -> Profile:
    """Pick the profile for a build, preferring a configured custom name."""
    if is_release:
        if release is not None:
            return Profile(ProfileKind.NAMED, release)
        return Profile(ProfileKind.RELEASE)
    if debug is not None:
        return Profile(ProfileKind.NAMED, debug)
    return Profile(ProfileKind.DEBUG)