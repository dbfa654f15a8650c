"""Command-line parsing."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from leptoscargo.new import NewCommand


class LogTarget(Enum):
    """Dependencies whose logs may be shown."""

    WASM = "wasm"
    SERVER = "server"


class CommandName(Enum):
    """The available subcommands."""

    BUILD = "build"
    TEST = "test"
    END_TO_END = "end-to-end"
    SERVE = "serve"
    WATCH = "watch"
    NEW = "new"


@dataclass
class Opts:
    """Options shared by the build-related subcommands."""

    release: bool = False
    precompress: bool = False
    hot_reload: bool = False
    project: str | None = None
    features: list[str] = field(default_factory=list)
    lib_features: list[str] = field(default_factory=list)
    lib_cargo_args: list[str] | None = None
    bin_features: list[str] = field(default_factory=list)
    bin_cargo_args: list[str] | None = None
    verbose: int = 0


@dataclass
class Cli:
    """The parsed command line."""

    command: CommandName
    manifest_path: Path | None = None
    log: list[LogTarget] = field(default_factory=list)
    options: Opts | None = None
    new: NewCommand | None = None

    def opts(self) -> Opts | None:
        """A copy of the build options, or None for the `new` subcommand."""
        if self.command is CommandName.NEW or self.options is None:
            return None
        return replace(
            self.options,
            features=list(self.options.features),
            lib_features=list(self.options.lib_features),
            bin_features=list(self.options.bin_features),
        )


_DESCRIPTIONS = {
    CommandName.BUILD: "Build the server (feature ssr) and the client (wasm with feature hydrate).",
    CommandName.TEST: "Run the cargo tests for app, client and server.",
    CommandName.END_TO_END: "Start the server and end-2-end tests.",
    CommandName.SERVE: "Serve. Defaults to hydrate mode.",
    CommandName.WATCH: "Serve and automatically reload when files change.",
}


def _version() -> str:
    try:
        return version("leptoscargo")
    except PackageNotFoundError:
        return "unknown"


def _opts_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("-r", "--release", action="store_true",
                        help="Build artifacts in release mode, with optimizations.")
    parser.add_argument("-P", "--precompress", action="store_true",
                        help="Precompress static assets with gzip and brotli (release only).")
    parser.add_argument("--hot-reload", action="store_true",
                        help="Turn on partial hot-reloading.")
    parser.add_argument("-p", "--project",
                        help="Which project to use, from a list of projects defined in a workspace.")
    parser.add_argument("--features", action="append",
                        help="The features to use when compiling all targets.")
    parser.add_argument("--lib-features", action="append",
                        help="The features to use when compiling the lib target.")
    parser.add_argument("--lib-cargo-args", action="append",
                        help="The cargo flags to pass when compiling the lib target.")
    parser.add_argument("--bin-features", action="append",
                        help="The features to use when compiling the bin target.")
    parser.add_argument("--bin-cargo-args", action="append",
                        help="The cargo flags to pass when compiling the bin target.")
    parser.add_argument("-v", dest="verbose", action="count", default=0,
                        help="Verbosity (-v: verbose, -vv: very verbose).")
    return parser


def _add_new_parser(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        CommandName.NEW.value,
        help="Start wizard for creating a new project (using cargo-generate).",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("-g", "--git", help="Git repository to clone template from.")
    source.add_argument("-p", "--path", help="Local path to copy the template from.")
    ref = parser.add_mutually_exclusive_group()
    ref.add_argument("-b", "--branch", help="Branch to use when installing from git.")
    ref.add_argument("-t", "--tag", help="Tag to use when installing from git.")
    parser.add_argument("-n", "--name", help="Directory to create / project name.")
    parser.add_argument("-f", "--force", action="store_true",
                        help="Don't convert the project name to kebab-case.")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enables more verbose output.")
    parser.add_argument("--init", action="store_true",
                        help="Generate the template directly into the current dir.")
    return parser


def _build_parser() -> tuple[argparse.ArgumentParser, argparse.ArgumentParser]:
    parser = argparse.ArgumentParser(prog="cargo-leptos")
    parser.add_argument("--version", action="version", version=_version())
    parser.add_argument("--manifest-path", type=Path, help="Path to Cargo.toml.")
    parser.add_argument("--log", action="append", type=LogTarget,
                        choices=list(LogTarget), metavar="{wasm,server}",
                        help="Output logs from dependencies (multiple --log accepted).")
    subparsers = parser.add_subparsers(dest="command", required=True)
    common = _opts_parser()
    for name, description in _DESCRIPTIONS.items():
        subparsers.add_parser(name.value, parents=[common], help=description)
    new_parser = _add_new_parser(subparsers)
    return parser, new_parser


def parse_args(argv: Sequence[str] | None = None) -> Cli:
    """Parse a command line; exits with status 2 on invalid input."""
    parser, new_parser = _build_parser()
    ns = parser.parse_args(argv)
    command = CommandName(ns.command)
    cli = Cli(command=command, manifest_path=ns.manifest_path, log=ns.log or [])
    if command is CommandName.NEW:
        new = NewCommand(
            git=ns.git,
            branch=ns.branch,
            tag=ns.tag,
            path=ns.path,
            name=ns.name,
            force=ns.force,
            verbose=ns.verbose,
            init=ns.init,
        )
        if new == NewCommand():
            new_parser.print_help()
            raise SystemExit(2)
        cli.new = new
    else:
        cli.options = Opts(
            release=ns.release,
            precompress=ns.precompress,
            hot_reload=ns.hot_reload,
            project=ns.project,
            features=ns.features or [],
            lib_features=ns.lib_features or [],
            lib_cargo_args=ns.lib_cargo_args,
            bin_features=ns.bin_features or [],
            bin_cargo_args=ns.bin_cargo_args,
            verbose=ns.verbose,
        )
    return cli