"""Workspace metadata as reported by `cargo metadata`."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Target:
    """A build target of a package (lib, bin, test, ...)."""

    name: str
    kind: tuple[str, ...] = ()
    crate_types: tuple[str, ...] = ()
    src_path: Path | None = None

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> Target:
        src_path = data.get("src_path")
        return cls(
            name=data["name"],
            kind=tuple(data.get("kind") or ()),
            crate_types=tuple(data.get("crate_types") or ()),
            src_path=Path(src_path) if src_path else None,
        )

    def is_bin(self) -> bool:
        return "bin" in self.kind


@dataclass
class Package:
    """A package of the workspace or one of its dependencies."""

    id: str
    name: str
    manifest_path: Path
    targets: list[Target] = field(default_factory=list)
    metadata: Any = None
    path_dependencies: list[Path] = field(default_factory=list)

    @classmethod
    def _from_json(cls, data: dict[str, Any]) -> Package:
        return cls(
            id=data["id"],
            name=data["name"],
            manifest_path=Path(data["manifest_path"]),
            targets=[Target._from_json(t) for t in data.get("targets") or ()],
            metadata=data.get("metadata"),
            path_dependencies=[
                Path(dep["path"])
                for dep in data.get("dependencies") or ()
                if dep.get("path")
            ],
        )

    def has_bin_target(self) -> bool:
        return any(target.is_bin() for target in self.targets)

    def cdylib_target(self) -> Target | None:
        """The first target building a C dynamic library, if any."""
        return next(
            (
                target
                for target in self.targets
                if "cdylib" in target.crate_types or "cdylib" in target.kind
            ),
            None,
        )


@dataclass
class Metadata:
    """The parts of the cargo metadata that project resolution needs."""

    workspace_root: Path
    target_directory: Path
    packages: list[Package] = field(default_factory=list)
    workspace_members: list[str] = field(default_factory=list)
    workspace_metadata: Any = None

    @classmethod
    def from_json(cls, data: str | bytes | dict[str, Any]) -> Metadata:
        """Build from the JSON output of `cargo metadata --format-version 1`."""
        if isinstance(data, (str, bytes)):
            data = json.loads(data)
        try:
            return cls(
                workspace_root=Path(data["workspace_root"]),
                target_directory=Path(data["target_directory"]),
                packages=[Package._from_json(p) for p in data.get("packages") or ()],
                workspace_members=list(data.get("workspace_members") or ()),
                workspace_metadata=data.get("metadata"),
            )
        except (KeyError, TypeError, AttributeError) as err:
            raise ValueError(f"invalid cargo metadata: {err}") from err

    @classmethod
    def load(cls, manifest_path: str | Path) -> Metadata:
        """Run `cargo metadata` for the given manifest and parse its output."""
        cmd = [
            "cargo",
            "metadata",
            "--format-version",
            "1",
            "--manifest-path",
            str(manifest_path),
        ]
        try:
            completed = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as err:
            raise RuntimeError(f"Could not run cargo metadata: {err}") from err
        if completed.returncode != 0:
            raise RuntimeError(f"cargo metadata failed: {completed.stderr.strip()}")
        return cls.from_json(completed.stdout)

    def workspace_packages(self) -> list[Package]:
        members = set(self.workspace_members)
        return [package for package in self.packages if package.id in members]

    def _relative(self, path: Path) -> Path:
        try:
            return path.relative_to(self.workspace_root)
        except ValueError:
            return path

    def rel_target_dir(self) -> Path:
        """The target directory relative to the workspace root."""
        return self._relative(self.target_directory)

    def src_path_dependencies(self, package_id: str) -> list[Path]:
        """Source dirs of all (transitive) path dependencies of a package."""
        by_id = {package.id: package for package in self.packages}
        by_dir = {package.manifest_path.parent: package for package in self.packages}
        start = by_id.get(package_id)
        if start is None:
            return []
        seen = {package_id}
        found: list[Path] = []

        def visit(package: Package) -> None:
            for dep_dir in package.path_dependencies:
                dep = by_dir.get(dep_dir)
                if dep is None or dep.id in seen:
                    continue
                seen.add(dep.id)
                found.append(self._relative(dep_dir / "src"))
                visit(dep)

        visit(start)
        return found