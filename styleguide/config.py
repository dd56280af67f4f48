"""
Styleguide configuration: which sections exist and where their modules live.

Loaded from a JSON file (``styleguide.json`` in the working directory, or the
path in ``STYLEGUIDE_CONFIG``):

    {
      "test_pattern": "\\\\.test\\\\.py$",
      "sections": [
        {"name": "Buttons", "path": "components/buttons"},
        {"name": "Forms",   "components": ["myapp.forms.input"]}
      ]
    }

``path`` sections become a DirectoryContext (relative to the config file);
``components`` sections import each dotted module name.
"""

from __future__ import annotations

import importlib
import json
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Pattern

from styleguide.catalog.models import BuildError, ConfigError, RawSection
from styleguide.context import DirectoryContext


log = logging.getLogger("styleguide.config")

DEFAULT_CONFIG_NAME = "styleguide.json"
DEFAULT_TEST_PATTERN = r"\.test\.py$"
CONFIG_ENV = "STYLEGUIDE_CONFIG"


# ── .env loader ────────────────────────────────────────────────────

def load_env(root: Path | None = None) -> None:
    """Copy ``KEY=value`` lines from .env / .env.local into os.environ.

    Variables already set in the environment win.
    """
    root = root or Path.cwd()
    for name in (".env", ".env.local"):
        p = root / name
        if p.exists():
            for line in p.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if line and "=" in line and not line.startswith("#"):
                    k, v = line.split("=", 1)
                    k = k.strip()
                    v = v.strip().strip('"').strip("'")
                    if k and k not in os.environ:
                        os.environ[k] = v


# ── Models ─────────────────────────────────────────────────────────

@dataclass
class SectionConfig:
    name: str
    path: Path | None = None            # context section
    components: list[str] | None = None  # explicit section (dotted module names)


@dataclass
class StyleguideConfig:
    """Parsed config file.  ``get_sections()`` imports on every call."""
    sections: list[SectionConfig]
    test_pattern: Pattern[str] = field(default_factory=lambda: re.compile(DEFAULT_TEST_PATTERN))
    source_file: Path | None = None

    def get_sections(self) -> list[RawSection]:
        raw = []
        for sec in self.sections:
            if sec.path is not None:
                raw.append(RawSection(sec.name, context=DirectoryContext(sec.path)))
            else:
                modules, errors = self._import_components(sec)
                raw.append(RawSection(sec.name, components=modules, errors=errors))
        return raw

    def _import_components(self, sec: SectionConfig) -> tuple[list[Any], list[BuildError]]:
        if self.source_file is not None:
            base = str(self.source_file.parent)
            if base not in sys.path:
                sys.path.insert(0, base)
        importlib.invalidate_caches()

        modules, errors = [], []
        for dotted in sec.components or []:
            try:
                modules.append(_import_fresh(dotted))
            except Exception as exc:
                log.error("Failed to import component module %s (section %s)",
                          dotted, sec.name, exc_info=True)
                errors.append(BuildError(dotted, "load", f"{type(exc).__name__}: {exc}"))
        return modules, errors


def _import_fresh(dotted: str) -> ModuleType:
    """Import *dotted*, re-executing it if an earlier build already did.

    The reloaded module creates a new ``__dependency_resolver__``, so its
    test modules are read from disk again as well.
    """
    module = sys.modules.get(dotted)
    if module is None:
        return importlib.import_module(dotted)
    return importlib.reload(module)


@dataclass
class StaticConfig:
    """Config built in code from ready-made RawSections."""
    sections: list[RawSection]
    test_pattern: Pattern[str] = field(default_factory=lambda: re.compile(DEFAULT_TEST_PATTERN))

    def get_sections(self) -> list[RawSection]:
        return list(self.sections)


# ── Parsing ────────────────────────────────────────────────────────

def _parse_section(data: Any, base: Path, index: int) -> SectionConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"sections[{index}] must be an object")
    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigError(f"sections[{index}].name must be a non-empty string")

    has_path = "path" in data
    has_components = "components" in data
    if has_path == has_components:
        raise ConfigError(f"Section '{name}' must declare exactly one of 'path' or 'components'")

    if has_path:
        return SectionConfig(name=name, path=(base / data["path"]).resolve())

    components = data["components"]
    if not isinstance(components, list) or not all(isinstance(c, str) for c in components):
        raise ConfigError(f"Section '{name}': 'components' must be a list of module names")
    return SectionConfig(name=name, components=components)


def _parse_config(data: Any, source_file: Path) -> StyleguideConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"{source_file}: top level must be an object")
    sections = data.get("sections")
    if not isinstance(sections, list):
        raise ConfigError(f"{source_file}: 'sections' must be a list")

    pattern = data.get("test_pattern", DEFAULT_TEST_PATTERN)
    try:
        test_pattern = re.compile(pattern)
    except (re.error, TypeError) as exc:
        raise ConfigError(f"{source_file}: invalid test_pattern {pattern!r}: {exc}") from exc

    base = source_file.parent
    return StyleguideConfig(
        sections=[_parse_section(s, base, i) for i, s in enumerate(sections)],
        test_pattern=test_pattern,
        source_file=source_file,
    )


# ── Public API ─────────────────────────────────────────────────────

def config_path(explicit: str | Path | None = None) -> Path:
    """CLI flag, then $STYLEGUIDE_CONFIG, then ./styleguide.json."""
    if explicit:
        return Path(explicit).resolve()
    env = os.environ.get(CONFIG_ENV)
    if env:
        return Path(env).resolve()
    return (Path.cwd() / DEFAULT_CONFIG_NAME).resolve()


def load_config(path: str | Path | None = None) -> StyleguideConfig:
    p = config_path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config {p}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Parse error in {p}: {exc}") from exc

    config = _parse_config(data, p)
    log.info("Loaded config %s (%d sections)", p, len(config.sections))
    return config
