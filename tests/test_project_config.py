import logging
import os
from pathlib import Path

import pytest

from leptoscargo.metadata import Metadata
from leptoscargo.project_config import (
    ConfigError,
    ProjectConfig,
    ProjectDefinition,
    load_dotenvs,
    overlay_env,
    parse_definitions,
)


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("LEPTOS_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


def _metadata(project2_metadata=None, project2_kinds=("cdylib", "rlib")):
    if project2_metadata is None:
        project2_metadata = {"leptos": {"style-file": "src/main.scss"}}
    return Metadata.from_json(
        {
            "workspace_root": "/ws",
            "target_directory": "/ws/target",
            "workspace_members": ["p2"],
            "metadata": {
                "leptos": [
                    {
                        "name": "project1",
                        "bin-package": "server-package",
                        "lib-package": "front-package",
                    }
                ]
            },
            "packages": [
                {
                    "id": "p2",
                    "name": "project2",
                    "manifest_path": "/ws/project2/Cargo.toml",
                    "targets": [
                        {"name": "project2", "kind": list(project2_kinds),
                         "crate_types": list(project2_kinds)},
                        {"name": "project2", "kind": ["bin"], "crate_types": ["bin"]},
                    ],
                    "dependencies": [],
                    "metadata": project2_metadata,
                }
            ],
        }
    )


def test_defaults():
    conf = ProjectConfig.from_metadata(Path(), {}, _metadata())
    assert conf.site_root == Path("/ws/target/site")
    assert conf.site_addr == "127.0.0.1:3000"
    assert conf.reload_port == 3001
    assert conf.site_pkg_dir == Path("pkg")
    assert conf.browserquery == "defaults"
    assert conf.tmp_dir == Path("target/tmp")
    assert conf.features == []
    assert conf.lib_default_features is False


def test_kebab_case_keys_are_read():
    section = {
        "output-name": "demo",
        "site-root": "target/site/demo",
        "assets-dir": "public",
        "lib-features": ["hydrate"],
        "bin-default-features": True,
        "reload-port": 3005,
        "bin-profile-release": "server-release",
        "unknown-key": 1,
    }
    conf = ProjectConfig.from_metadata(Path("demo"), section, _metadata())
    assert conf.output_name == "demo"
    assert conf.site_root == Path("target/site/demo")
    assert conf.assets_dir == Path("public")
    assert conf.lib_features == ["hydrate"]
    assert conf.bin_default_features is True
    assert conf.reload_port == 3005
    assert conf.bin_profile_release == "server-release"
    assert conf.config_dir == Path("demo")


@pytest.mark.parametrize("root", ["/", ".", "CARGO_TARGET_DIR", "CARGO_BUILD_TARGET_DIR"])
def test_forbidden_site_roots(root):
    with pytest.raises(ConfigError, match="site-root cannot be"):
        ProjectConfig.from_metadata(Path(), {"site-root": root}, _metadata())


def test_build_target_dir_marker_is_replaced():
    conf = ProjectConfig.from_metadata(
        Path(), {"site-root": "CARGO_BUILD_TARGET_DIR/site/x"}, _metadata()
    )
    assert conf.site_root == Path("/ws/target/site/x")


def test_same_ports_rejected():
    with pytest.raises(ConfigError, match="cannot be the same"):
        ProjectConfig.from_metadata(
            Path(), {"site-addr": "127.0.0.1:3001"}, _metadata()
        )


@pytest.mark.parametrize("addr", ["localhost:3000", "127.0.0.1", "127.0.0.1:port"])
def test_invalid_site_addr(addr):
    with pytest.raises(ConfigError):
        ProjectConfig.from_metadata(Path(), {"site-addr": addr}, _metadata())


def test_wrong_type_rejected():
    with pytest.raises(ConfigError, match="features"):
        ProjectConfig.from_metadata(Path(), {"features": "ssr"}, _metadata())


def test_overlay_env_environment_wins():
    conf = ProjectConfig()
    overlay_env(
        conf,
        [("LEPTOS_OUTPUT_NAME", "from-dotenv"), ("LEPTOS_SITE_PKG_DIR", "assets")],
        {"LEPTOS_OUTPUT_NAME": "from-env", "LEPTOS_BIN_TARGET_DIR": "out"},
    )
    assert conf.output_name == "from-env"
    assert conf.site_pkg_dir == Path("assets")
    assert conf.bin_target_dir == "out"


def test_overlay_env_parses_addr_and_port():
    conf = ProjectConfig()
    overlay_env(conf, None, {"LEPTOS_SITE_ADDR": "[::1]:8080", "LEPTOS_RELOAD_PORT": "8081"})
    assert conf.site_addr == "[::1]:8080"
    assert conf.reload_port == 8081


def test_overlay_env_bad_port():
    with pytest.raises(ConfigError):
        overlay_env(ProjectConfig(), None, {"LEPTOS_RELOAD_PORT": "70000"})


def test_overlay_env_warns_on_unknown_key(caplog):
    with caplog.at_level(logging.WARNING, logger="leptoscargo.project_config"):
        overlay_env(ProjectConfig(), None, {"LEPTOS_UNKNOWN": "1", "LEPTOS_SASS_VERSION": "1"})
    assert "LEPTOS_UNKNOWN" in caplog.text
    assert "LEPTOS_SASS_VERSION" not in caplog.text


def test_load_dotenvs_walks_up(tmp_path):
    (tmp_path / ".env").write_text("LEPTOS_OUTPUT_NAME=fromfile\n")
    sub = tmp_path / "a" / "b"
    sub.mkdir(parents=True)
    assert load_dotenvs(sub) == [("LEPTOS_OUTPUT_NAME", "fromfile")]


def test_load_dotenvs_none_found():
    assert load_dotenvs(Path()) is None


def test_from_metadata_uses_dotenv(tmp_path):
    (tmp_path / ".env").write_text("LEPTOS_RELOAD_PORT=4000\n")
    conf = ProjectConfig.from_metadata(Path(), {}, _metadata())
    assert conf.reload_port == 4000


def test_environment_overrides_dotenv(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("LEPTOS_BROWSERQUERY=from-file\n")
    monkeypatch.setenv("LEPTOS_BROWSERQUERY", "from-env")
    conf = ProjectConfig.from_metadata(Path(), {}, _metadata())
    assert conf.browserquery == "from-env"


def test_parse_definitions():
    found = parse_definitions(_metadata())
    definitions = [definition for definition, _ in found]
    assert definitions == [
        ProjectDefinition("project1", "server-package", "front-package"),
        ProjectDefinition("project2", "project2", "project2"),
    ]
    package_conf = found[1][1]
    assert package_conf.config_dir == Path("project2")
    assert package_conf.style_file == Path("src/main.scss")


def test_parse_definitions_requires_cdylib():
    with pytest.raises(ConfigError, match="cdylib"):
        parse_definitions(_metadata(project2_kinds=("lib",)))


def test_parse_definitions_requires_package_names():
    metadata = _metadata(project2_metadata={})
    metadata.workspace_metadata = {"leptos": [{"name": "project1", "lib-package": "x"}]}
    with pytest.raises(ConfigError, match="bin-package"):
        parse_definitions(metadata)