"""Catalog serialization — convert dataclasses to JSON-safe dicts."""

from __future__ import annotations

from typing import Any

from .models import BuildError, CatalogResult, Component, Section, TestVariation


def catalog_to_dict(result: CatalogResult) -> dict:
    """Serialize a CatalogResult to a JSON-safe dict for the web API."""
    sections = [section_to_dict(s) for s in result.sections]
    return {
        "ok": result.ok,
        "section_count": len(sections),
        "component_count": sum(len(s["components"]) for s in sections),
        "sections": sections,
        "errors": [error_to_dict(e) for e in result.errors],
    }


def section_to_dict(s: Section) -> dict:
    return {
        "name": s.name,
        "is_opened": s.is_opened,
        "components": [component_to_dict(c) for c in s.components],
    }


def component_to_dict(c: Component) -> dict:
    """Serialize a Component to a JSON-safe dict."""
    return {
        "url": c.url,
        "name": c.name,
        "description": c.description,
        "prop_types": _json_safe(c.prop_types),
        "tests": [variation_to_dict(t) for t in c.tests],
        "source": c.source,
    }


def variation_to_dict(t: TestVariation) -> dict:
    r = t.renderable
    module = getattr(r, "__module__", None)
    qualname = getattr(r, "__qualname__", None)
    return {
        "name": t.name,
        "renderable": f"{module}.{qualname}" if module and qualname else repr(r),
    }


def error_to_dict(e: BuildError) -> dict:
    return {"source": e.source, "stage": e.stage, "message": e.message}


def _json_safe(value: Any) -> Any:
    """Prop type descriptors may hold types or callables; stringify those."""
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, type):
        return value.__name__
    return repr(value)
