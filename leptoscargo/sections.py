"""Derived configuration sections: site files, style, tailwind, assets and end-to-end."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from leptoscargo.project_config import ConfigError, ProjectConfig


@dataclass(frozen=True)
class SiteFile:
    """A file written into the site; `site` is its path as served."""

    dest: Path
    site: Path


@dataclass(frozen=True)
class SourcedSiteFile:
    """A site file produced from a source file."""

    source: Path
    dest: Path
    site: Path


@dataclass(frozen=True)
class TailwindConfig:
    input_file: Path
    config_file: Path
    tmp_file: Path

    @classmethod
    def resolve(cls, conf: ProjectConfig) -> TailwindConfig | None:
        """The tailwind setup, or None when no tailwind input file is configured."""
        if conf.tailwind_input_file is None:
            if conf.tailwind_config_file is not None:
                raise ConfigError(
                    "The Cargo.toml `tailwind-input-file` is required "
                    "when using `tailwind-config-file`"
                )
            return None
        config_file = conf.tailwind_config_file or Path("tailwind.config.js")
        return cls(
            input_file=conf.config_dir / conf.tailwind_input_file,
            config_file=conf.config_dir / config_file,
            tmp_file=conf.tmp_dir / "tailwind.css",
        )


def _css_site_path(conf: ProjectConfig) -> Path:
    return (conf.site_pkg_dir / conf.output_name).with_suffix(".css")


@dataclass(frozen=True)
class StyleConfig:
    file: SourcedSiteFile | None
    browserquery: str
    tailwind: TailwindConfig | None
    site_file: SiteFile

    @classmethod
    def resolve(cls, conf: ProjectConfig) -> StyleConfig:
        site_rel = _css_site_path(conf)
        site_file = SiteFile(dest=conf.site_root / site_rel, site=site_rel)
        style_file = None
        if conf.style_file is not None:
            style_file = SourcedSiteFile(
                source=conf.config_dir / conf.style_file,
                dest=conf.site_root / site_rel,
                site=site_rel,
            )
        return cls(
            file=style_file,
            browserquery=conf.browserquery,
            tailwind=TailwindConfig.resolve(conf),
            site_file=site_file,
        )


@dataclass(frozen=True)
class AssetsConfig:
    dir: Path

    @classmethod
    def resolve(cls, conf: ProjectConfig) -> AssetsConfig | None:
        if conf.assets_dir is None:
            return None
        return cls(dir=conf.config_dir / conf.assets_dir)


@dataclass(frozen=True)
class End2EndConfig:
    cmd: str
    dir: Path

    @classmethod
    def resolve(cls, conf: ProjectConfig) -> End2EndConfig | None:
        if conf.end2end_cmd is None:
            return None
        return cls(cmd=conf.end2end_cmd, dir=conf.end2end_dir or Path())