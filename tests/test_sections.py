from pathlib import Path

import pytest

from leptoscargo.project_config import ConfigError, ProjectConfig
from leptoscargo.sections import (
    AssetsConfig,
    End2EndConfig,
    SiteFile,
    SourcedSiteFile,
    StyleConfig,
    TailwindConfig,
)


def _conf(**kwargs):
    values = {
        "output_name": "project1",
        "config_dir": Path("project1"),
        "tmp_dir": Path("target/tmp"),
        "site_root": Path("target/site/project1"),
    }
    values.update(kwargs)
    return ProjectConfig(**values)


def test_tailwind_absent():
    assert TailwindConfig.resolve(_conf()) is None


def test_tailwind_config_without_input_is_error():
    with pytest.raises(ConfigError, match="tailwind-input-file"):
        TailwindConfig.resolve(_conf(tailwind_config_file=Path("tw.js")))


def test_tailwind_defaults():
    tw = TailwindConfig.resolve(_conf(tailwind_input_file=Path("style/input.css")))
    assert tw.input_file == Path("project1/style/input.css")
    assert tw.config_file == Path("project1/tailwind.config.js")
    assert tw.tmp_file == Path("target/tmp/tailwind.css")


def test_tailwind_custom_config_file():
    tw = TailwindConfig.resolve(
        _conf(tailwind_input_file=Path("in.css"), tailwind_config_file=Path("tw.js"))
    )
    assert tw.config_file == Path("project1/tw.js")


def test_style_site_file_without_style():
    style = StyleConfig.resolve(_conf())
    assert style.file is None
    assert style.tailwind is None
    assert style.site_file == SiteFile(
        dest=Path("target/site/project1/pkg/project1.css"),
        site=Path("pkg/project1.css"),
    )
    assert style.browserquery == "defaults"


def test_style_with_style_file():
    style = StyleConfig.resolve(
        _conf(style_file=Path("src/main.scss"), browserquery="last 2 versions")
    )
    assert style.file == SourcedSiteFile(
        source=Path("project1/src/main.scss"),
        dest=style.site_file.dest,
        site=style.site_file.site,
    )
    assert style.browserquery == "last 2 versions"


def test_style_includes_tailwind():
    style = StyleConfig.resolve(_conf(tailwind_input_file=Path("in.css")))
    assert style.tailwind.input_file == Path("project1/in.css")


def test_style_propagates_tailwind_error():
    with pytest.raises(ConfigError):
        StyleConfig.resolve(_conf(tailwind_config_file=Path("tw.js")))


def test_assets():
    assert AssetsConfig.resolve(_conf()) is None
    assets = AssetsConfig.resolve(_conf(assets_dir=Path("public")))
    assert assets.dir == Path("project1/public")


def test_end2end_absent():
    assert End2EndConfig.resolve(_conf(end2end_dir=Path("e2e"))) is None


def test_end2end_default_dir():
    e2e = End2EndConfig.resolve(_conf(end2end_cmd="npx playwright test"))
    assert e2e.cmd == "npx playwright test"
    assert e2e.dir == Path()


def test_end2end_with_dir():
    e2e = End2EndConfig.resolve(_conf(end2end_cmd="cargo test", end2end_dir=Path("e2e")))
    assert e2e.dir == Path("e2e")