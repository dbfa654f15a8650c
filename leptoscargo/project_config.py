"""Per-project configuration read from Cargo metadata, `.env` files and the environment."""

from __future__ import annotations

import ipaddress
import logging
import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from leptoscargo.metadata import Metadata

logger = logging.getLogger(__name__)

CARGO_TARGET_DIR_MARKER = "CARGO_TARGET_DIR"
"""A site root starting with this is placed in the cargo target directory."""
CARGO_BUILD_TARGET_DIR_MARKER = "CARGO_BUILD_TARGET_DIR"
"""A site root starting with this is placed in the cargo target directory."""

_IGNORED_ENV = frozenset(
    {
        "LEPTOS_TAILWIND_VERSION",
        "LEPTOS_SASS_VERSION",
        "LEPTOS_CARGO_GENERATE_VERSION",
        "LEPTOS_WASM_OPT_VERSION",
    }
)


class ConfigError(Exception):
    """The project configuration is invalid."""


def _parse_socket_addr(text: str) -> str:
    host, sep, port_text = text.rpartition(":")
    if not sep:
        raise ConfigError(f"invalid socket address syntax: {text!r}")
    try:
        if host.startswith("[") and host.endswith("]"):
            ip = ipaddress.IPv6Address(host[1:-1])
            canonical = f"[{ip}]"
        else:
            canonical = str(ipaddress.IPv4Address(host))
    except ValueError as err:
        raise ConfigError(f"invalid socket address syntax: {text!r}") from err
    return f"{canonical}:{_parse_port_text(port_text)}"


def _addr_port(addr: str) -> int:
    return int(addr.rpartition(":")[2])


def _check_port(value: int) -> int:
    if not 0 <= value <= 0xFFFF:
        raise ConfigError(f"port out of range: {value}")
    return value


def _parse_port_text(text: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise ConfigError(f"invalid port: {text!r}")
    return _check_port(int(text))


def _as_str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"invalid type for `{key}`: expected a string")
    return value


def _as_path(key: str, value: Any) -> Path:
    return Path(_as_str(key, value))


def _as_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"invalid type for `{key}`: expected a boolean")
    return value


def _as_str_list(key: str, value: Any) -> list[str]:
    if not isinstance(value, list):
        raise ConfigError(f"invalid type for `{key}`: expected a list")
    return [_as_str(key, item) for item in value]


def _as_path_list(key: str, value: Any) -> list[Path]:
    return [Path(item) for item in _as_str_list(key, value)]


def _as_port(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"invalid type for `{key}`: expected a port number")
    return _check_port(value)


def _as_addr(key: str, value: Any) -> str:
    return _parse_socket_addr(_as_str(key, value))


# (attribute, converter, may be null); the metadata key is the kebab-case attribute.
_SECTION_FIELDS: list[tuple[str, Callable[[str, Any], Any], bool]] = [
    ("output_name", _as_str, False),
    ("site_addr", _as_addr, False),
    ("site_root", _as_path, False),
    ("site_pkg_dir", _as_path, False),
    ("style_file", _as_path, True),
    ("tailwind_input_file", _as_path, True),
    ("tailwind_config_file", _as_path, True),
    ("assets_dir", _as_path, True),
    ("js_dir", _as_path, True),
    ("watch_additional_files", _as_path_list, True),
    ("reload_port", _as_port, False),
    ("end2end_cmd", _as_str, True),
    ("end2end_dir", _as_path, True),
    ("browserquery", _as_str, False),
    ("bin_target", _as_str, False),
    ("bin_target_triple", _as_str, True),
    ("bin_target_dir", _as_str, True),
    ("bin_cargo_command", _as_str, True),
    ("bin_cargo_args", _as_str, True),
    ("features", _as_str_list, False),
    ("lib_features", _as_str_list, False),
    ("lib_default_features", _as_bool, False),
    ("lib_cargo_args", _as_str, True),
    ("bin_features", _as_str_list, False),
    ("bin_default_features", _as_bool, False),
    ("separate_front_target_dir", _as_bool, False),
    ("lib_profile_dev", _as_str, True),
    ("lib_profile_release", _as_str, True),
    ("bin_profile_dev", _as_str, True),
    ("bin_profile_release", _as_str, True),
]

_ENV_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "LEPTOS_OUTPUT_NAME": ("output_name", str),
    "LEPTOS_SITE_ROOT": ("site_root", Path),
    "LEPTOS_SITE_PKG_DIR": ("site_pkg_dir", Path),
    "LEPTOS_STYLE_FILE": ("style_file", Path),
    "LEPTOS_ASSETS_DIR": ("assets_dir", Path),
    "LEPTOS_SITE_ADDR": ("site_addr", _parse_socket_addr),
    "LEPTOS_RELOAD_PORT": ("reload_port", _parse_port_text),
    "LEPTOS_END2END_CMD": ("end2end_cmd", str),
    "LEPTOS_END2END_DIR": ("end2end_dir", Path),
    "LEPTOS_BROWSERQUERY": ("browserquery", str),
    "LEPTOS_BIN_TARGET_TRIPLE": ("bin_target_triple", str),
    "LEPTOS_BIN_TARGET_DIR": ("bin_target_dir", str),
    "LEPTOS_BIN_CARGO_COMMAND": ("bin_cargo_command", str),
}


@dataclass
class ProjectConfig:
    """The `leptos` metadata section of one project, with env overrides applied."""

    output_name: str = ""
    site_addr: str = "127.0.0.1:3000"
    site_root: Path = field(default_factory=lambda: Path(CARGO_TARGET_DIR_MARKER) / "site")
    site_pkg_dir: Path = field(default_factory=lambda: Path("pkg"))
    style_file: Path | None = None
    tailwind_input_file: Path | None = None
    tailwind_config_file: Path | None = None
    assets_dir: Path | None = None
    js_dir: Path | None = None
    watch_additional_files: list[Path] | None = None
    reload_port: int = 3001
    end2end_cmd: str | None = None
    end2end_dir: Path | None = None
    browserquery: str = "defaults"
    bin_target: str = ""
    bin_target_triple: str | None = None
    bin_target_dir: str | None = None
    bin_cargo_command: str | None = None
    bin_cargo_args: str | None = None
    features: list[str] = field(default_factory=list)
    lib_features: list[str] = field(default_factory=list)
    lib_default_features: bool = False
    lib_cargo_args: str | None = None
    bin_features: list[str] = field(default_factory=list)
    bin_default_features: bool = False
    config_dir: Path = field(default_factory=Path)
    tmp_dir: Path = field(default_factory=Path)
    separate_front_target_dir: bool = False
    lib_profile_dev: str | None = None
    lib_profile_release: str | None = None
    bin_profile_dev: str | None = None
    bin_profile_release: str | None = None

    @classmethod
    def _from_section(cls, section: Any) -> ProjectConfig:
        if not isinstance(section, dict):
            raise ConfigError("the leptos metadata section must be a table")
        values: dict[str, Any] = {}
        for attr, convert, nullable in _SECTION_FIELDS:
            key = attr.replace("_", "-")
            if key not in section:
                continue
            raw = section[key]
            values[attr] = None if raw is None and nullable else convert(key, raw)
        return cls(**values)

    @classmethod
    def from_metadata(
        cls, directory: str | Path, section: Any, metadata: Metadata
    ) -> ProjectConfig:
        """Read and validate a configuration section found in `directory`."""
        conf = cls._from_section(section)
        conf.config_dir = Path(directory)
        try:
            conf.tmp_dir = (metadata.target_directory / "tmp").relative_to(
                metadata.workspace_root
            )
        except ValueError as err:
            raise ConfigError(
                "the cargo target directory must be inside the workspace root"
            ) from err
        overlay_env(conf, load_dotenvs(conf.config_dir))
        conf._resolve_site_root(metadata.target_directory)
        if _addr_port(conf.site_addr) == conf.reload_port:
            raise ConfigError(
                f"The site-addr port and reload-port cannot be the same: {conf.reload_port}"
            )
        return conf

    def _resolve_site_root(self, target_directory: Path) -> None:
        forbidden = {
            Path("/"),
            Path("."),
            Path(CARGO_TARGET_DIR_MARKER),
            Path(CARGO_BUILD_TARGET_DIR_MARKER),
        }
        if self.site_root in forbidden:
            raise ConfigError(
                f"site-root cannot be '{self.site_root}'. "
                "All the content is erased when building the site."
            )
        for marker in (CARGO_TARGET_DIR_MARKER, CARGO_BUILD_TARGET_DIR_MARKER):
            parts = self.site_root.parts
            if parts[:1] == (marker,):
                self.site_root = target_directory.joinpath(*parts[1:])


@dataclass(frozen=True)
class ProjectDefinition:
    """Which packages make up a project."""

    name: str
    bin_package: str
    lib_package: str

    @classmethod
    def _from_section(cls, section: Any) -> ProjectDefinition:
        if not isinstance(section, dict):
            raise ConfigError("the leptos metadata section must be a table")
        values = {}
        for attr in ("name", "bin_package", "lib_package"):
            key = attr.replace("_", "-")
            if key not in section:
                raise ConfigError(f"missing field `{key}`")
            values[attr] = _as_str(key, section[key])
        return cls(**values)


def load_dotenvs(directory: str | Path) -> list[tuple[str, str]] | None:
    """Read the nearest `.env` file in `directory` or one of its parents."""
    current = Path(directory)
    while True:
        candidate = current / ".env"
        if candidate.is_file():
            return [
                (key, value)
                for key, value in dotenv_values(candidate).items()
                if value is not None
            ]
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _overlay(conf: ProjectConfig, envs: Iterable[tuple[str, str]]) -> None:
    for key, value in envs:
        target = _ENV_FIELDS.get(key)
        if target is not None:
            attr, convert = target
            setattr(conf, attr, convert(value))
        elif key.startswith("LEPTOS_") and key not in _IGNORED_ENV:
            logger.warning("Env %s is not used by cargo-leptos", key)


def overlay_env(
    conf: ProjectConfig,
    dotenvs: Iterable[tuple[str, str]] | None,
    environ: Mapping[str, str] | None = None,
) -> None:
    """Apply `.env` values, then the process environment, onto a configuration."""
    if dotenvs is not None:
        _overlay(conf, dotenvs)
    _overlay(conf, (os.environ if environ is None else environ).items())


def _leptos_metadata(metadata: Any) -> Any:
    if isinstance(metadata, dict) and "leptos" in metadata:
        return metadata["leptos"]
    return None


def parse_definitions(
    metadata: Metadata,
) -> list[tuple[ProjectDefinition, ProjectConfig]]:
    """All projects declared in the workspace metadata and in package metadata."""
    found: list[tuple[ProjectDefinition, ProjectConfig]] = []
    workspace = _leptos_metadata(metadata.workspace_metadata)
    if isinstance(workspace, list):
        for section in workspace:
            conf = ProjectConfig.from_metadata(Path(), section, metadata)
            found.append((ProjectDefinition._from_section(section), conf))

    for package in metadata.workspace_packages():
        section = _leptos_metadata(package.metadata)
        if section is None:
            continue
        try:
            directory = package.manifest_path.relative_to(metadata.workspace_root).parent
        except ValueError as err:
            raise ConfigError(
                f"package {package.name} is outside the workspace root"
            ) from err
        conf = ProjectConfig.from_metadata(directory, section, metadata)
        if package.cdylib_target() is None:
            raise ConfigError(
                "Cargo.toml has leptos metadata but is missing a cdylib library target. "
                f"{package.manifest_path}"
            )
        if not package.has_bin_target():
            raise ConfigError(
                "Cargo.toml has leptos metadata but is missing a bin target. "
                f"{package.manifest_path}"
            )
        found.append((ProjectDefinition(package.name, package.name, package.name), conf))
    return found