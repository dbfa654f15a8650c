"""Cargo command lines for building and testing the front end and the server."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass

from leptoscargo.packages import WASM_TARGET
from leptoscargo.profile import Profile
from leptoscargo.project import Project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CargoCommand:
    """A cargo invocation: the program, its arguments and the extra environment."""

    program: str
    args: tuple[str, ...]
    envs: tuple[tuple[str, str], ...]

    @property
    def envs_str(self) -> str:
        """The extra environment as `NAME=value` pairs separated by spaces."""
        return " ".join(f"{name}={value}" for name, value in self.envs)

    @property
    def line(self) -> str:
        """The command line as shown to the user."""
        return "cargo " + " ".join(self.args)

    def spawn(self) -> subprocess.Popen:
        """Start the command with the extra environment added to the current one."""
        env = dict(os.environ)
        env.update(self.envs)
        try:
            return subprocess.Popen([self.program, *self.args], env=env)
        except OSError as err:
            raise RuntimeError(f"Could not spawn {self.program}: {err}") from err


def _add_common(
    args: list[str],
    default_features: bool,
    features: list[str],
    cargo_args: list[str] | None,
    profile: Profile,
) -> None:
    if not default_features:
        args.append("--no-default-features")
    if features:
        args.append(f"--features={','.join(features)}")
    if cargo_args:
        args.append(" ".join(cargo_args))
    args.extend(profile.cargo_args())


def build_cargo_front_cmd(cmd: str, wasm: bool, proj: Project) -> CargoCommand:
    """The cargo command for the lib (front end) package."""
    lib = proj.lib
    args = [cmd, f"--package={lib.name}", "--lib"]
    if lib.front_target_path is not None:
        args.append(f"--target-dir={lib.front_target_path}")
    if wasm:
        args.append(f"--target={WASM_TARGET}")
    _add_common(args, lib.default_features, lib.features, lib.cargo_args, lib.profile)
    return CargoCommand("cargo", tuple(args), tuple(proj.to_envs()))


def build_cargo_server_cmd(cmd: str, proj: Project) -> CargoCommand:
    """The cargo command for the bin (server) package."""
    bin_pkg = proj.bin
    args = [cmd, f"--package={bin_pkg.name}"]
    if cmd != "test":
        args.append(f"--bin={bin_pkg.target}")
    if bin_pkg.target_dir is not None:
        args.append(f"--target-dir={bin_pkg.target_dir}")
    if bin_pkg.target_triple is not None:
        args.append(f"--target={bin_pkg.target_triple}")
    logger.debug("BIN CARGO ARGS: %r", bin_pkg.cargo_args)
    _add_common(
        args,
        bin_pkg.default_features,
        bin_pkg.features,
        bin_pkg.cargo_args,
        bin_pkg.profile,
    )
    program = bin_pkg.cargo_command or "cargo"
    return CargoCommand(program, tuple(args), tuple(proj.to_envs()))


def front_cargo_process(
    cmd: str, wasm: bool, proj: Project
) -> tuple[str, str, subprocess.Popen]:
    """Start cargo on the front end; returns the env string, the line and the process."""
    command = build_cargo_front_cmd(cmd, wasm, proj)
    return command.envs_str, command.line, command.spawn()


def server_cargo_process(cmd: str, proj: Project) -> tuple[str, str, subprocess.Popen]:
    """Start cargo on the server; returns the env string, the line and the process."""
    command = build_cargo_server_cmd(cmd, proj)
    return command.envs_str, command.line, command.spawn()