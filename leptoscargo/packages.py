"""The lib (front end) and bin (server) packages that make up a project."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from leptoscargo.cli import Opts
from leptoscargo.metadata import Metadata, Package, Target
from leptoscargo.profile import Profile, select_profile
from leptoscargo.project_config import ConfigError, ProjectConfig, ProjectDefinition
from leptoscargo.sections import SiteFile, SourcedSiteFile

WASM_TARGET = "wasm32-unknown-unknown"


def _features(
    cli_specific: list[str],
    config_specific: list[str],
    config_all: list[str],
    cli_all: list[str],
) -> list[str]:
    features = list(cli_specific or config_specific)
    features.extend(config_all)
    features.extend(cli_all)
    return features


def _rel_dir(abs_dir: Path, workspace_root: Path) -> Path:
    try:
        return abs_dir.relative_to(workspace_root)
    except ValueError as err:
        raise ConfigError(f"{abs_dir} is not inside the workspace {workspace_root}") from err


def _src_paths(metadata: Metadata, package: Package, rel_dir: Path) -> list[Path]:
    paths = metadata.src_path_dependencies(package.id)
    paths.append(Path("src") if rel_dir == Path(".") else rel_dir / "src")
    return paths


@dataclass
class LibPackage:
    """The package compiled to WASM for the browser."""

    name: str
    abs_dir: Path
    rel_dir: Path
    wasm_file: SourcedSiteFile
    js_file: SiteFile
    features: list[str]
    default_features: bool
    output_name: str
    src_paths: list[Path]
    front_target_path: Path | None
    profile: Profile
    cargo_args: list[str] | None

    @classmethod
    def resolve(
        cls,
        cli: Opts,
        metadata: Metadata,
        project: ProjectDefinition,
        config: ProjectConfig,
    ) -> LibPackage:
        name = project.lib_package
        crate_name = name.replace("-", "_")
        output_name = config.output_name or crate_name

        package = next(
            (p for p in metadata.workspace_packages() if p.name == name), None
        )
        if package is None:
            raise ConfigError(f'Could not find the project lib-package "{name}"')

        features = _features(
            cli.lib_features, config.lib_features, config.features, cli.features
        )
        abs_dir = package.manifest_path.parent
        rel_dir = _rel_dir(abs_dir, metadata.workspace_root)
        profile = select_profile(
            cli.release, config.lib_profile_release, config.lib_profile_dev
        )

        source_dir = metadata.rel_target_dir()
        if config.separate_front_target_dir:
            source_dir = source_dir / "front"
        source = (source_dir / WASM_TARGET / str(profile) / crate_name).with_suffix(".wasm")
        wasm_site = (config.site_pkg_dir / output_name).with_suffix(".wasm")
        wasm_file = SourcedSiteFile(
            source=source, dest=config.site_root / wasm_site, site=wasm_site
        )

        js_site = (config.site_pkg_dir / output_name).with_suffix(".js")
        js_file = SiteFile(dest=config.site_root / js_site, site=js_site)

        front_target_path = (
            metadata.target_directory / "front"
            if config.separate_front_target_dir
            else None
        )

        return cls(
            name=name,
            abs_dir=abs_dir,
            rel_dir=rel_dir,
            wasm_file=wasm_file,
            js_file=js_file,
            features=features,
            default_features=config.lib_default_features,
            output_name=output_name,
            src_paths=_src_paths(metadata, package, rel_dir),
            front_target_path=front_target_path,
            profile=profile,
            cargo_args=None if cli.lib_cargo_args is None else list(cli.lib_cargo_args),
        )


def _many_targets_found(package: str) -> ConfigError:
    return ConfigError(
        f'Several bin targets found for member "{package}", please specify which one '
        'to use with: [[workspace.metadata.leptos]] bin-target = "name"'
    )


def _target_not_found(target: str) -> ConfigError:
    return ConfigError(
        "Could not find the target specified: "
        f'[[workspace.metadata.leptos]] bin-target = "{target}"'
    )


def _select_target(name: str, package: Package, wanted: str) -> Target:
    targets = [t for t in package.targets if t.is_bin()]
    if wanted:
        found = next((t for t in targets if t.name == wanted), None)
        if found is None:
            raise _target_not_found(wanted)
        return found
    if len(targets) == 1:
        return targets[0]
    if not targets:
        raise ConfigError(f"No bin targets found for member {name}")
    raise _many_targets_found(name)


@dataclass
class BinPackage:
    """The package compiled into the server executable."""

    name: str
    abs_dir: Path
    rel_dir: Path
    exe_file: Path
    target: str
    features: list[str]
    default_features: bool
    src_paths: list[Path]
    profile: Profile
    target_triple: str | None
    target_dir: str | None
    cargo_command: str | None
    cargo_args: list[str] | None

    @classmethod
    def resolve(
        cls,
        cli: Opts,
        metadata: Metadata,
        project: ProjectDefinition,
        config: ProjectConfig,
    ) -> BinPackage:
        features = _features(
            cli.bin_features, config.bin_features, config.features, cli.features
        )
        name = project.bin_package
        package = next(
            (
                p
                for p in metadata.workspace_packages()
                if p.name == name and p.has_bin_target()
            ),
            None,
        )
        if package is None:
            raise ConfigError(f'Could not find the project bin-package "{name}"')

        target = _select_target(name, package, config.bin_target)

        abs_dir = package.manifest_path.parent
        rel_dir = _rel_dir(abs_dir, metadata.workspace_root)
        profile = select_profile(
            cli.release, config.bin_profile_release, config.bin_profile_dev
        )

        exe_dir = (
            Path(config.bin_target_dir)
            if config.bin_target_dir is not None
            else metadata.rel_target_dir()
        )
        if config.bin_target_triple is not None:
            exe_dir = exe_dir / config.bin_target_triple
        suffix = ".exe" if sys.platform == "win32" else ""
        exe_file = (exe_dir / str(profile) / name).with_suffix(suffix)

        return cls(
            name=name,
            abs_dir=abs_dir,
            rel_dir=rel_dir,
            exe_file=exe_file,
            target=target.name,
            features=features,
            default_features=config.bin_default_features,
            src_paths=_src_paths(metadata, package, rel_dir),
            profile=profile,
            target_triple=config.bin_target_triple,
            target_dir=config.bin_target_dir,
            cargo_command=config.bin_cargo_command,
            cargo_args=None if cli.bin_cargo_args is None else list(cli.bin_cargo_args),
        )