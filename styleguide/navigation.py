"""Navigation: pick the active section/component from the URL hash."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from styleguide.catalog.models import Component, Section


# Reserved hash: render every component (visual regression gallery).
GALLERY_HASH = "vrt"


@dataclass
class Selection:
    section: Section
    component: Component


def normalize_hash(value: str | None) -> str:
    """``"#Buttons-Primary"`` → ``"Buttons-Primary"``"""
    if not value:
        return ""
    return value[1:] if value.startswith("#") else value


def is_gallery(hash: str) -> bool:
    return hash == GALLERY_HASH


def resolve(sections: Sequence[Section], hash: str) -> Selection | None:
    """Return the component whose url equals *hash*, opening its section.

    Falls back to the first component of the first section when the hash
    is empty or matches nothing.  Returns None when there is nothing to
    select.  Callers check ``is_gallery`` first; the gallery hash is never
    resolved to a single component.
    """
    if hash:
        for section in sections:
            for component in section.components:
                if component.url == hash:
                    section.is_opened = True
                    return Selection(section, component)

    if not sections or not sections[0].components:
        return None
    return Selection(sections[0], sections[0].components[0])
