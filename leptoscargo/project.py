"""Resolved projects and the overall configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from leptoscargo.cli import Opts
from leptoscargo.metadata import Metadata
from leptoscargo.packages import BinPackage, LibPackage
from leptoscargo.project_config import ConfigError, ProjectConfig, parse_definitions
from leptoscargo.sections import AssetsConfig, End2EndConfig, StyleConfig


@dataclass(frozen=True)
class Site:
    """Where and how the site is served."""

    addr: str
    reload_port: int
    root_dir: Path
    pkg_dir: Path

    @property
    def root_relative_pkg_dir(self) -> Path:
        return self.root_dir / self.pkg_dir


def _site(config: ProjectConfig) -> Site:
    return Site(
        addr=config.site_addr,
        reload_port=config.reload_port,
        root_dir=config.site_root,
        pkg_dir=config.site_pkg_dir,
    )


@dataclass(eq=False)
class Project:
    """A fully resolved project: its packages, style, site and options."""

    working_dir: Path
    name: str
    lib: LibPackage
    bin: BinPackage
    style: StyleConfig
    watch: bool
    release: bool
    precompress: bool
    hot_reload: bool
    site: Site
    end2end: End2EndConfig | None
    assets: AssetsConfig | None
    js_dir: Path
    watch_additional_files: list[Path] = field(default_factory=list)

    @classmethod
    def resolve(
        cls, cli: Opts, cwd: str | Path, metadata: Metadata, watch: bool
    ) -> list[Project]:
        """All projects; only the one under `cwd` if exactly one lies there."""
        cwd = Path(cwd)
        resolved: list[Project] = []
        for definition, config in parse_definitions(metadata):
            if not config.output_name:
                config.output_name = definition.name
            lib = LibPackage.resolve(cli, metadata, definition, config)
            resolved.append(
                cls(
                    working_dir=metadata.workspace_root,
                    name=definition.name,
                    lib=lib,
                    bin=BinPackage.resolve(cli, metadata, definition, config),
                    style=StyleConfig.resolve(config),
                    watch=watch,
                    release=cli.release,
                    precompress=cli.precompress,
                    hot_reload=cli.hot_reload,
                    site=_site(config),
                    end2end=End2EndConfig.resolve(config),
                    assets=AssetsConfig.resolve(config),
                    js_dir=config.js_dir if config.js_dir is not None else Path("src"),
                    watch_additional_files=list(config.watch_additional_files or []),
                )
            )

        in_cwd = [
            p
            for p in resolved
            if p.bin.abs_dir.is_relative_to(cwd) or p.lib.abs_dir.is_relative_to(cwd)
        ]
        return in_cwd if len(in_cwd) == 1 else resolved

    def to_envs(self) -> list[tuple[str, str]]:
        """Environment variables to set when running external commands."""
        envs = [
            ("LEPTOS_OUTPUT_NAME", self.lib.output_name),
            ("LEPTOS_SITE_ROOT", str(self.site.root_dir)),
            ("LEPTOS_SITE_PKG_DIR", str(self.site.pkg_dir)),
            ("LEPTOS_SITE_ADDR", self.site.addr),
            ("LEPTOS_RELOAD_PORT", str(self.site.reload_port)),
            ("LEPTOS_LIB_DIR", str(self.lib.rel_dir)),
            ("LEPTOS_BIN_DIR", str(self.bin.rel_dir)),
        ]
        if self.watch:
            envs.append(("LEPTOS_WATCH", "ON"))
        return envs


def _names(projects: list[Project]) -> str:
    return ", ".join(p.name for p in projects)


@dataclass
class Config:
    """The projects to work on, with the options they were resolved with."""

    working_dir: Path
    projects: list[Project]
    cli: Opts
    watch: bool

    @classmethod
    def from_metadata(
        cls, cli: Opts, cwd: str | Path, metadata: Metadata, watch: bool
    ) -> Config:
        projects = Project.resolve(cli, cwd, metadata, watch)
        if not projects:
            raise ConfigError(
                "Please define leptos projects in the workspace Cargo.toml "
                "sections [[workspace.metadata.leptos]]"
            )
        if cli.project is not None:
            chosen = next((p for p in projects if p.name == cli.project), None)
            if chosen is None:
                raise ConfigError(
                    f'The specified project "{cli.project}" not found. '
                    f"Available projects: {_names(projects)}"
                )
            projects = [chosen]
        return cls(
            working_dir=metadata.workspace_root,
            projects=projects,
            cli=cli,
            watch=watch,
        )

    @classmethod
    def load(
        cls, cli: Opts, cwd: str | Path, manifest_path: str | Path, watch: bool
    ) -> Config:
        """Run `cargo metadata` on the manifest and resolve its projects."""
        return cls.from_metadata(cli, cwd, Metadata.load(manifest_path), watch)

    def current_project(self) -> Project:
        if len(self.projects) == 1:
            return self.projects[0]
        raise ConfigError(
            f"There are several projects available ({_names(self.projects)}). "
            "Please select one of them with the command line parameter --project"
        )