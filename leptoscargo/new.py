"""The `new` subcommand, which creates a project from a template."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass

_SHORT_TEMPLATES = {
    "leptos-rs/start": "https://github.com/leptos-rs/start",
    "leptos-rs/start-axum": "https://github.com/leptos-rs/start-axum",
}


def absolute_git_url(url: str | None) -> str | None:
    """Expand the well-known short template names into full repository URLs."""
    if url is None:
        return None
    return _SHORT_TEMPLATES.get(url, url)


@dataclass
class NewCommand:
    """Options forwarded to cargo-generate."""

    git: str | None = None
    branch: str | None = None
    tag: str | None = None
    path: str | None = None
    name: str | None = None
    force: bool = False
    verbose: bool = False
    init: bool = False

    def to_args(self) -> list[str]:
        """The cargo-generate arguments for these options."""
        args: list[str] = []
        valued = [
            ("git", absolute_git_url(self.git)),
            ("branch", self.branch),
            ("tag", self.tag),
            ("path", self.path),
            ("name", self.name),
        ]
        for option, value in valued:
            if value is not None:
                args += [f"--{option}", value]
        flags = [("force", self.force), ("verbose", self.verbose), ("init", self.init)]
        args += [f"--{option}" for option, is_set in flags if is_set]
        return args

    def run(self) -> int:
        """Run cargo-generate and return its exit code."""
        exe = shutil.which("cargo-generate")
        if exe is None:
            raise RuntimeError(
                "Could not find cargo-generate (verify that it is installed)"
            )
        try:
            completed = subprocess.run([exe, "generate", *self.to_args()], check=False)
        except OSError as err:
            raise RuntimeError(
                "Could not spawn cargo-generate command (verify that it is installed)"
            ) from err
        return completed.returncode