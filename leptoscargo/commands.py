"""Subcommand entry points."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from leptoscargo.cargo import front_cargo_process, server_cargo_process
from leptoscargo.cli import CommandName, parse_args
from leptoscargo.project import Config, Project
from leptoscargo.project_config import ConfigError

logger = logging.getLogger(__name__)


def test_proj(proj: Project) -> bool:
    """Run the server and front end cargo tests; True if both succeeded."""
    envs, line, proc = server_cargo_process("test", proj)
    server_status = proc.wait()
    logger.debug("Cargo envs: %s", envs)
    logger.info("Cargo server tests finished %s", line)

    envs, line, proc = front_cargo_process("test", False, proj)
    front_status = proc.wait()
    logger.debug("Cargo envs: %s", envs)
    logger.info("Cargo front tests finished %s", line)

    return server_status == 0 and front_status == 0


def test_all(conf: Config) -> None:
    """Test every project; raise naming the first one that failed."""
    first_failed: Project | None = None
    for proj in conf.projects:
        if not test_proj(proj) and first_failed is None:
            first_failed = proj
    if first_failed is not None:
        raise RuntimeError(f"Tests failed for {first_failed.name}")


def _setup_logging(verbose: int) -> None:
    level = logging.INFO if verbose == 0 else logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns the process exit status."""
    cli = parse_args(argv)
    opts = cli.opts()
    _setup_logging(opts.verbose if opts is not None else 0)
    try:
        if cli.command is CommandName.NEW:
            assert cli.new is not None
            return cli.new.run()
        if cli.command is not CommandName.TEST or opts is None:
            raise RuntimeError(f"the {cli.command.value} command is not available")
        cwd = Path.cwd()
        manifest = cli.manifest_path or cwd / "Cargo.toml"
        conf = Config.load(opts, cwd, manifest, False)
        test_all(conf)
    except (ConfigError, RuntimeError, ValueError, OSError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0