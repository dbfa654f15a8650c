"""Sets of source changes that decide which build steps must run."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

RESCAN = "rescan"
"""The watched event meaning the whole asset directory must be resynchronised."""


class ChangeKind(Enum):
    """What kind of file changed."""

    BIN_SOURCE = "bin-source"
    LIB_SOURCE = "lib-source"
    ASSET = "asset"
    STYLE = "style"
    CONF = "conf"
    ADDITIONAL = "additional"


@dataclass(frozen=True)
class Change:
    """A single change; asset changes carry the watched event that caused them."""

    kind: ChangeKind
    watched: Hashable | None = None

    def __post_init__(self) -> None:
        if self.kind is ChangeKind.ASSET and self.watched is None:
            raise ValueError("an asset change needs a watched event")
        if self.kind is not ChangeKind.ASSET and self.watched is not None:
            raise ValueError(f"a {self.kind.value} change carries no watched event")

    @classmethod
    def asset(cls, watched: Hashable) -> Change:
        return cls(ChangeKind.ASSET, watched)


class ChangeSet:
    """An ordered collection of distinct changes."""

    def __init__(self, changes: Iterable[Change] = ()) -> None:
        self._changes: list[Change] = []
        for change in changes:
            self.add(change)

    @classmethod
    def all_changes(cls) -> ChangeSet:
        """A set that makes every build step run."""
        return cls(
            [
                Change(ChangeKind.BIN_SOURCE),
                Change(ChangeKind.LIB_SOURCE),
                Change(ChangeKind.STYLE),
                Change(ChangeKind.CONF),
                Change.asset(RESCAN),
            ]
        )

    def __len__(self) -> int:
        return len(self._changes)

    def __bool__(self) -> bool:
        return bool(self._changes)

    def __iter__(self) -> Iterator[Change]:
        return iter(self._changes)

    def __contains__(self, change: object) -> bool:
        return change in self._changes

    def __repr__(self) -> str:
        return f"ChangeSet({self._changes!r})"

    def copy(self) -> ChangeSet:
        return ChangeSet(self._changes)

    def add(self, change: Change) -> bool:
        """Add a change; return True if it was not already present."""
        if change in self._changes:
            return False
        self._changes.append(change)
        return True

    def clear(self) -> None:
        self._changes.clear()

    def _has(self, *kinds: ChangeKind) -> bool:
        return any(Change(kind) in self._changes for kind in kinds)

    def need_server_build(self) -> bool:
        return self._has(ChangeKind.BIN_SOURCE, ChangeKind.CONF, ChangeKind.ADDITIONAL)

    def need_front_build(self) -> bool:
        return self._has(ChangeKind.LIB_SOURCE, ChangeKind.CONF, ChangeKind.ADDITIONAL)

    def need_style_build(self, css_files: bool, css_in_source: bool) -> bool:
        return (css_files and self._has(ChangeKind.STYLE)) or (
            css_in_source and self._has(ChangeKind.LIB_SOURCE)
        )

    def assets(self) -> Iterator[Hashable]:
        """The watched events of all asset changes, in order."""
        for change in self._changes:
            if change.kind is ChangeKind.ASSET:
                yield change.watched