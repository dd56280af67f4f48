"""Search: narrow the catalog to components whose name contains a query."""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from styleguide.catalog.models import Section


def copy_sections(sections: Sequence[Section]) -> list[Section]:
    """Independent copy: new Section objects and lists, shared Components.

    Components are frozen, so sharing them never lets a change to one
    catalog leak into the other.
    """
    return [replace(s, components=list(s.components)) for s in sections]


def filter_sections(default_sections: Sequence[Section], query: str) -> list[Section]:
    """Return the sections/components matching *query* (case-insensitive).

    *default_sections* is read-only here: the result is always built from
    fresh copies, so filtering twice with the same query gives equal
    results and the source catalog stays the restore point.
    """
    needle = query.lower()
    if not needle.strip():
        return copy_sections(default_sections)

    result = []
    for section in default_sections:
        matches = [c for c in section.components if needle in c.name.lower()]
        if matches:
            result.append(replace(section, components=matches, is_opened=True))
    return result
