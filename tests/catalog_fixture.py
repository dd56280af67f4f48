"""Catalog test fixture: in-memory sections for builder/search/navigation tests.

Modules are plain dicts (the builder accepts any mapping as a module):

  Buttons  (explicit list)   Primary, Secondary
  Forms    (explicit list)   Input

Each component carries a MappingContext as its dependency resolver holding
one test module and one non-test helper module that must be ignored.
"""

from __future__ import annotations

import re

from styleguide.catalog.builder import build_sections
from styleguide.catalog.models import RawSection
from styleguide.config import DEFAULT_TEST_PATTERN, StaticConfig
from styleguide.context import MappingContext


TEST_PATTERN = re.compile(DEFAULT_TEST_PATTERN)


def make_variation(name: str):
    def variation():
        return f"<{name}/>"
    variation.__name__ = name
    return variation


def make_component(name: str, description: str = "", variations=("Default",)) -> dict:
    """A component module with metadata and a resolver over its examples."""
    test_module = {v: make_variation(v) for v in variations}
    return {
        "__meta__": {"name": name, "description": description, "prop_types": {"label": "str"}},
        "__dependency_resolver__": MappingContext({
            f"./{name.lower()}.test.py": test_module,
            f"./{name.lower()}_helpers.py": {"helper": make_variation("helper")},
        }),
    }


def make_raw_sections() -> list[RawSection]:
    return [
        RawSection("Buttons", components=[
            make_component("Primary", "Main call to action", ("Default", "Disabled")),
            make_component("Secondary"),
        ]),
        RawSection("Forms", components=[
            make_component("Input", "Single line text field"),
        ]),
    ]


def make_config() -> StaticConfig:
    return StaticConfig(sections=make_raw_sections(), test_pattern=TEST_PATTERN)


def make_sections():
    return build_sections(make_raw_sections(), TEST_PATTERN)
