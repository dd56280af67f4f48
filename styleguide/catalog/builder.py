"""Catalog builder — turns raw section declarations into normalized sections."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping, Pattern
from urllib.parse import quote

from styleguide.context import (
    ModuleContext, file_stem, module_exports, reserved_attr,
)
from .models import (
    BuildError, CatalogResult, Component, Meta, RawSection, Section,
    TestVariation,
)


log = logging.getLogger("styleguide.catalog")

META_ATTR = "__meta__"
RESOLVER_ATTR = "__dependency_resolver__"


def encode_url(section_name: str, component_name: str) -> str:
    """Same escaping as JavaScript's ``encodeURIComponent``."""
    return quote(f"{section_name}-{component_name}", safe="-_.!~*'()")


def _compile(test_pattern: str | Pattern[str]) -> Pattern[str]:
    if isinstance(test_pattern, str):
        return re.compile(test_pattern)
    return test_pattern


# ── Parsing ────────────────────────────────────────────────────────

def _parse_meta(data: Any) -> Meta:
    if not isinstance(data, Mapping):
        raise TypeError(f"{META_ATTR} must be a mapping, got {type(data).__name__}")
    return Meta(
        name=str(data["name"]),
        description=data.get("description") or "",
        prop_types=dict(data.get("prop_types") or {}),
    )


def _test_variations(modules: Iterable[Any]) -> tuple[TestVariation, ...]:
    """Flatten the non-reserved exports of every test module."""
    tests = []
    for module in modules:
        for key, value in module_exports(module).items():
            tests.append(TestVariation(
                name=getattr(value, "__name__", key),
                renderable=value,
            ))
    return tuple(tests)


class _Build:
    """Error sink shared by both extraction strategies of one build."""

    def __init__(self, test_pattern: Pattern[str]):
        self.test_pattern = test_pattern
        self.errors: list[BuildError] = []

    def load(self, context: ModuleContext, key: str) -> tuple[bool, Any]:
        try:
            return True, context.load(key)
        except Exception as exc:
            log.error("Failed to load component: %s", key, exc_info=True)
            self.errors.append(BuildError(key, "load", f"{type(exc).__name__}: {exc}"))
            return False, None

    def meta(self, module: Any, source: str) -> Meta | None:
        data = reserved_attr(module, META_ATTR)
        if data is None:
            return None
        try:
            return _parse_meta(data)
        except (KeyError, TypeError, ValueError) as exc:
            log.warning("Invalid %s in %s: %s", META_ATTR, source, exc)
            self.errors.append(BuildError(source, "meta", f"Missing/invalid field: {exc}"))
            return None

    # ── Context strategy ───────────────────────────────────────────

    def from_context(self, section_name: str, context: ModuleContext) -> list[Component]:
        definitions: list[tuple[str, str, Any]] = []
        specs: list[tuple[str, Any]] = []

        for key in context.keys():
            loaded, module = self.load(context, key)
            if not loaded:
                continue
            if self.test_pattern.search(key):
                specs.append((file_stem(key), module))
            else:
                definitions.append((key, file_stem(key), module))

        components = []
        for key, stem, module in definitions:
            meta = self.meta(module, key)
            if meta is None:
                continue
            # Loose association: "button" also claims "button_group.test".
            owned = [spec for spec_stem, spec in specs if stem in spec_stem]
            components.append(Component(
                url=encode_url(section_name, meta.name),
                name=meta.name,
                description=meta.description,
                prop_types=meta.prop_types,
                tests=_test_variations(owned),
                source=key,
            ))
        return components

    # ── Explicit-list strategy ─────────────────────────────────────

    def from_components(self, section_name: str, modules: Iterable[Any]) -> list[Component]:
        components = []
        for module in modules:
            resolver = reserved_attr(module, RESOLVER_ATTR)
            if resolver is None:
                continue
            source = getattr(module, "__name__", None) or repr(module)
            meta = self.meta(module, source)
            if meta is None:
                continue

            test_modules = []
            for key in resolver.keys():
                if not self.test_pattern.search(key):
                    continue
                loaded, test_module = self.load(resolver, key)
                if loaded:
                    test_modules.append(test_module)

            components.append(Component(
                url=encode_url(section_name, meta.name),
                name=meta.name,
                description=meta.description,
                prop_types=meta.prop_types,
                tests=_test_variations(test_modules),
                source=source,
            ))
        return components

    def section(self, raw: RawSection) -> Section:
        self.errors.extend(raw.errors)
        if raw.is_context:
            components = self.from_context(raw.name, raw.context)
        else:
            components = self.from_components(raw.name, raw.components)
        return Section(name=raw.name, components=components)


def _check_urls(sections: list[Section]) -> list[BuildError]:
    counts: dict[str, int] = {}
    for section in sections:
        for comp in section.components:
            counts[comp.url] = counts.get(comp.url, 0) + 1
    errors = []
    for url, count in counts.items():
        if count > 1:
            log.warning("Duplicate component url %s (appears %d times)", url, count)
            errors.append(BuildError(url, "url", f"Duplicate component url (appears {count} times)"))
    return errors


# ── Public API ─────────────────────────────────────────────────────

def build_catalog(
    raw_sections: Iterable[RawSection],
    test_pattern: str | Pattern[str],
) -> CatalogResult:
    """Build the normalized catalog from raw section declarations.

    Modules that fail to load are skipped (error recorded and logged);
    definitions without metadata and components without a dependency
    resolver are left out silently.  The build itself never raises for a
    bad module.
    """
    build = _Build(_compile(test_pattern))
    sections = [build.section(raw) for raw in raw_sections]
    errors = build.errors + _check_urls(sections)

    log.info(
        "Built catalog: %d sections, %d components, %d errors",
        len(sections), sum(len(s.components) for s in sections), len(errors),
    )
    return CatalogResult(sections=sections, errors=errors)


def build_sections(
    raw_sections: Iterable[RawSection],
    test_pattern: str | Pattern[str],
) -> list[Section]:
    return build_catalog(raw_sections, test_pattern).sections
