"""Tests for config loading and the full on-disk build.

The fixture tree (tests/fixtures) mirrors a real project:
  components/buttons/   context section with a module that fails on import
  sg_forms/             explicit section: one documented component, one
                        without resolver, one module name that does not exist
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import pytest

from styleguide.catalog.builder import build_catalog
from styleguide.catalog.models import ConfigError
from styleguide.config import (
    CONFIG_ENV, DEFAULT_TEST_PATTERN, config_path, load_config, load_env,
)
from styleguide.state import Styleguide


FIXTURES = Path(__file__).parent / "fixtures"
CONFIG_FILE = FIXTURES / "styleguide.json"


def _write(tmp_path: Path, data) -> Path:
    p = tmp_path / "styleguide.json"
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


def test_load_config():
    config = load_config(CONFIG_FILE)
    assert config.source_file == CONFIG_FILE.resolve()
    assert [s.name for s in config.sections] == ["Buttons", "Forms"]
    assert config.sections[0].path == (FIXTURES / "components" / "buttons").resolve()
    assert config.sections[1].components == ["sg_forms.input", "sg_forms.undocumented", "sg_forms.missing"]
    assert config.test_pattern.search("./button.test.py")


def test_full_build(caplog):
    config = load_config(CONFIG_FILE)
    with caplog.at_level(logging.ERROR):
        result = build_catalog(config.get_sections(), config.test_pattern)

    buttons, forms = result.sections
    assert [c.name for c in buttons.components] == ["Button", "Button Group"]
    button, group = buttons.components
    assert [t.name for t in button.tests] == ["Primary", "Disabled", "Toolbar"]
    assert [t.name for t in group.tests] == ["Toolbar"]
    assert group.url == "Buttons-Button%20Group"
    assert button.prop_types == {"label": str, "disabled": bool}

    [input_] = forms.components
    assert input_.url == "Forms-Input"
    assert input_.source == "sg_forms.input"
    assert [t.name for t in input_.tests] == ["Empty", "Filled"]

    assert [(e.source, e.stage) for e in result.errors] == [
        ("./broken.py", "load"),
        ("sg_forms.missing", "load"),
    ]
    assert "ModuleNotFoundError" in result.errors[1].message
    assert "sg_forms.missing" in caplog.text
    assert "./broken.py" in caplog.text


def test_default_pattern(tmp_path):
    p = _write(tmp_path, {"sections": []})
    config = load_config(p)
    assert config.test_pattern.pattern == DEFAULT_TEST_PATTERN
    assert Styleguide(config).render().mode == "empty"


@pytest.mark.parametrize("data, message", [
    ([], "top level"),
    ({}, "'sections' must be a list"),
    ({"sections": [{"path": "x"}]}, "name"),
    ({"sections": [{"name": "A"}]}, "exactly one"),
    ({"sections": [{"name": "A", "path": "x", "components": []}]}, "exactly one"),
    ({"sections": [{"name": "A", "components": "x"}]}, "list of module names"),
    ({"sections": [], "test_pattern": "("}, "invalid test_pattern"),
])
def test_invalid_config(tmp_path, data, message):
    with pytest.raises(ConfigError, match=message):
        load_config(_write(tmp_path, data))


def test_missing_and_malformed_file(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read"):
        load_config(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="Parse error"):
        load_config(bad)


def test_config_path(tmp_path, monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    monkeypatch.chdir(tmp_path)
    assert config_path() == (tmp_path / "styleguide.json").resolve()
    monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "other.json"))
    assert config_path() == (tmp_path / "other.json").resolve()
    assert config_path(tmp_path / "flag.json") == (tmp_path / "flag.json").resolve()


def test_load_env(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text(
        "# comment\nSTYLEGUIDE_TEST_A='from-env'\nSTYLEGUIDE_TEST_B=file\n", encoding="utf-8")
    monkeypatch.delenv("STYLEGUIDE_TEST_A", raising=False)
    monkeypatch.setenv("STYLEGUIDE_TEST_B", "process")
    load_env(tmp_path)
    assert os.environ["STYLEGUIDE_TEST_A"] == "from-env"
    assert os.environ["STYLEGUIDE_TEST_B"] == "process"
    os.environ.pop("STYLEGUIDE_TEST_A", None)


def _write_component(pkg: Path, name: str, example: str) -> None:
    (pkg / "comp.py").write_text(
        "from pathlib import Path\n"
        "from styleguide.context import DirectoryContext\n"
        f"__meta__ = {{'name': {name!r}}}\n"
        "__dependency_resolver__ = DirectoryContext(Path(__file__).parent / 'examples')\n",
        encoding="utf-8")
    (pkg / "examples" / "comp.test.py").write_text(
        f"def {example}():\n    return {example!r}\n", encoding="utf-8")


def test_reload_reexecutes_explicit_components(tmp_path):
    pkg = tmp_path / "sg_reload_pkg"
    (pkg / "examples").mkdir(parents=True)
    (pkg / "__init__.py").write_text("", encoding="utf-8")
    _write_component(pkg, "Old", "One")
    cfg = _write(tmp_path, {"sections": [{"name": "Live", "components": ["sg_reload_pkg.comp"]}]})

    try:
        sg = Styleguide(load_config(cfg))
        [comp] = sg.default_sections[0].components
        assert (comp.name, [t.name for t in comp.tests]) == ("Old", ["One"])

        # different lengths, so a same-second rewrite cannot hit a stale .pyc
        _write_component(pkg, "Renamed", "Second")
        sg.reload()
        [comp] = sg.default_sections[0].components
        assert (comp.name, [t.name for t in comp.tests]) == ("Renamed", ["Second"])
        assert comp.url == "Live-Renamed"
    finally:
        for name in ("sg_reload_pkg.comp", "sg_reload_pkg"):
            sys.modules.pop(name, None)
        if str(tmp_path) in sys.path:
            sys.path.remove(str(tmp_path))
