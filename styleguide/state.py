"""
Application state: owns the catalogs and the current hash.

The styleguide keeps two catalogs built from the same config:

  default_sections   never mutated after a build; the search restore point
  sections           the live catalog shown in navigation; replaced on every
                     search change and marked ``is_opened`` by navigation

Events (config reload, hash change, search change) are plain method calls
and each one finishes before the next starts, so a search change is always
visible to the hash change that follows it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, Pattern

from styleguide.catalog.builder import build_catalog
from styleguide.catalog.models import BuildError, Component, Section
from styleguide.navigation import is_gallery, normalize_hash, resolve
from styleguide.search import copy_sections, filter_sections


log = logging.getLogger("styleguide.state")


class SectionSource(Protocol):
    test_pattern: Pattern[str]

    def get_sections(self) -> list[Any]: ...


@dataclass
class View:
    """What the UI should show for one render.

    mode         "empty" (nothing to show), "single" or "gallery"
    sections     one section holding one component (single), or
                 every live section (gallery)
    navigation   the full live catalog for the sidebar
    current_url  url to highlight in navigation (single mode only)
    """
    mode: str
    sections: list[Section] = field(default_factory=list)
    navigation: list[Section] = field(default_factory=list)
    current_url: str | None = None

    @property
    def component(self) -> Component | None:
        if self.mode == "single":
            return self.sections[0].components[0]
        return None


class Styleguide:
    def __init__(self, config: SectionSource | None = None, hash: str = ""):
        self.config = config
        self.hash = normalize_hash(hash)
        self.query = ""
        self.sections: list[Section] = []
        self.default_sections: list[Section] = []
        self.errors: list[BuildError] = []
        if config is not None:
            self.load(config)

    # ── Events ─────────────────────────────────────────────────────

    def load(self, config: SectionSource) -> None:
        """Rebuild both catalogs from scratch."""
        self.config = config
        raw_sections = config.get_sections()
        live = build_catalog(raw_sections, config.test_pattern)
        default = build_catalog(raw_sections, config.test_pattern)
        self.sections = live.sections
        self.default_sections = default.sections
        self.errors = default.errors
        self.query = ""
        if self.errors:
            log.warning("Catalog built with %d errors", len(self.errors))

    def reload(self) -> None:
        if self.config is None:
            raise RuntimeError("No config loaded")
        self.load(self.config)

    def on_hash_change(self, hash: str | None) -> None:
        self.hash = normalize_hash(hash)

    def on_search_change(self, query: str) -> None:
        self.query = query
        # Reset to the default catalog first, then narrow the fresh copy.
        self.sections = copy_sections(self.default_sections)
        self.sections = filter_sections(self.sections, query)

    # ── Render ─────────────────────────────────────────────────────

    def render(self) -> View:
        sections = self.sections
        if is_gallery(self.hash):
            return View(mode="gallery", sections=list(sections), navigation=sections)

        if not sections:
            return View(mode="empty")

        selection = resolve(sections, self.hash)
        if selection is None:
            return View(mode="empty", navigation=sections)

        content = Section(
            name=selection.section.name,
            components=[selection.component],
            is_opened=selection.section.is_opened,
        )
        return View(
            mode="single",
            sections=[content],
            navigation=sections,
            current_url=selection.component.url,
        )

    def find_component(self, url: str) -> Component | None:
        """Look up a component by url in the default catalog."""
        for section in self.default_sections:
            for comp in section.components:
                if comp.url == url:
                    return comp
        return None
