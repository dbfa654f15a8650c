# leptoscargo

A helper for Leptos web projects managed by cargo. It reads the
`[package.metadata.leptos]` and `[[workspace.metadata.leptos]]` sections of a
cargo manifest (through `cargo metadata`), resolves each project — lib and bin
packages, features, profiles, site layout, style, Tailwind, assets and
end-to-end settings — and builds the matching cargo command lines. From the
command line it runs the cargo tests of a project and creates new projects
from templates.

## Installation

```
pip install leptoscargo
```

`cargo` must be on your `PATH`. The `new` command also needs
`cargo-generate`.

## Command line

```
leptoscargo [--version] [--manifest-path PATH] [--log {wasm,server}] <command> [options]
```

`--manifest-path` defaults to `Cargo.toml` in the current directory.
`--log` is accepted (and may be repeated) but has no effect yet.

### `test`

Runs `cargo test` for the server package and then for the front package of
every selected project. The `LEPTOS_*` variables listed under
[Environment passed to cargo](#environment-passed-to-cargo) are set for both
runs. If any project fails, the command reports the first one that failed and
exits with status 1.

```
leptoscargo test --release --project project1
```

Options:

- `-r`, `--release`: use the release profile, or `lib-profile-release` /
  `bin-profile-release` when those are configured
- `-P`, `--precompress`: accepted and recorded on the project
- `--hot-reload`: accepted and recorded on the project
- `-p`, `--project NAME`: use only the named project of a workspace
- `--features F`: features for both targets (repeatable)
- `--lib-features F`, `--bin-features F`: features for one target; these
  replace the configured `lib-features` / `bin-features` (repeatable)
- `--lib-cargo-args A`, `--bin-cargo-args A`: extra cargo flags. Repeated
  values are joined by spaces into one argument.
- `-v`: debug logging

### `new`

Runs `cargo-generate generate` with the given options and exits with its
status. The options are `-g/--git`, `-p/--path`, `-b/--branch`, `-t/--tag`,
`-n/--name`, `-f/--force`, `-v/--verbose` and `--init`.

- `--git` and `--path` cannot be combined.
- `--branch` and `--tag` cannot be combined.
- The short forms `leptos-rs/start` and `leptos-rs/start-axum` are expanded
  to their full repository addresses.
- With no options at all, the command prints its help and exits with status 2.

```
leptoscargo new --git leptos-rs/start --name my-site
```

### Commands that are not available

The parser knows `build`, `serve`, `watch` and `end-to-end` and accepts the
same options as `test`. Running any of them ends with an error, "the
<command> command is not available", and exit status 1.

## What this package does not do

- It does not compile WASM or run wasm-bindgen or wasm-opt.
- It does not compile Sass, Tailwind or CSS.
- It does not copy assets into the site directory or precompress files.
- It does not serve the site, watch files for changes or hot-reload.
- It does not run end-to-end test commands.

The configuration for these steps is still read and resolved: `StyleConfig`,
`TailwindConfig`, `AssetsConfig`, `End2EndConfig` and `Site`.

## Configuration

Settings are read in this order, each source overriding the one before:

1. the manifest metadata (keys in kebab-case, for example `site-root`,
   `reload-port`, `bin-target`, `lib-features`, `tailwind-input-file`);
2. the nearest `.env` file, found by walking up from the project directory;
3. the process environment.

The recognised environment variables are:

- `LEPTOS_OUTPUT_NAME`
- `LEPTOS_SITE_ROOT`
- `LEPTOS_SITE_PKG_DIR`
- `LEPTOS_STYLE_FILE`
- `LEPTOS_ASSETS_DIR`
- `LEPTOS_SITE_ADDR`
- `LEPTOS_RELOAD_PORT`
- `LEPTOS_END2END_CMD`
- `LEPTOS_END2END_DIR`
- `LEPTOS_BROWSERQUERY`
- `LEPTOS_BIN_TARGET_TRIPLE`
- `LEPTOS_BIN_TARGET_DIR`
- `LEPTOS_BIN_CARGO_COMMAND`

Any other `LEPTOS_*` variable is logged as unused.

Defaults:

| Setting | Default |
| --- | --- |
| `site-addr` | `127.0.0.1:3000` |
| `reload-port` | `3001` |
| `site-root` | `CARGO_TARGET_DIR/site` |
| `site-pkg-dir` | `pkg` |
| `browserquery` | `defaults` |

Rules for the site root and ports:

- The site root may not be `/`, `.`, `CARGO_TARGET_DIR` or
  `CARGO_BUILD_TARGET_DIR`, because its content is erased on every build.
- A site root that starts with one of those two markers is placed under
  cargo's target directory.
- The site port and the reload port must differ.

Invalid settings raise `leptoscargo.project_config.ConfigError`.

When exactly one project lies under the current directory, only that project
is used.

## Environment passed to cargo

`Project.to_envs()` gives the variables set for every cargo command:

- `LEPTOS_OUTPUT_NAME`
- `LEPTOS_SITE_ROOT`
- `LEPTOS_SITE_PKG_DIR`
- `LEPTOS_SITE_ADDR`
- `LEPTOS_RELOAD_PORT`
- `LEPTOS_LIB_DIR`
- `LEPTOS_BIN_DIR`
- `LEPTOS_WATCH=ON`, only in watch mode

## Library use

```python
from leptoscargo.cli import Opts
from leptoscargo.project import Config
from leptoscargo.cargo import build_cargo_front_cmd, build_cargo_server_cmd

conf = Config.load(Opts(release=True), ".", "Cargo.toml", False)
proj = conf.current_project()

server = build_cargo_server_cmd("build", proj)
print(server.envs_str)  # LEPTOS_OUTPUT_NAME=... LEPTOS_SITE_ROOT=...
print(server.line)      # cargo build --package=... --bin=... --release

front = build_cargo_front_cmd("build", True, proj)
print(front.line)       # cargo build --package=... --lib --target=wasm32-unknown-unknown ...
```

### Loading metadata

`Config.load` runs `cargo metadata`. To work from metadata you already have,
use `Metadata.from_json` and `Config.from_metadata` instead.

### Running cargo

`CargoCommand.spawn()` starts a command with its environment added to the
current one. `front_cargo_process` and `server_cargo_process` build a command
and start it in one step.

### Other modules

- `leptoscargo.change.ChangeSet` records which kinds of source changed and
  tells which build steps (`need_server_build`, `need_front_build`,
  `need_style_build`) would be needed.
- `leptoscargo.profile.select_profile` picks the cargo profile for a build.