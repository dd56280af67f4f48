"""Catalog dataclasses: raw section declarations and the normalized catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Sequence

from styleguide.context import ModuleContext


class ConfigError(ValueError):
    """Raised when a section declaration or config file is malformed."""
    pass


# ── Raw input ──────────────────────────────────────────────────────

@dataclass
class RawSection:
    """One declared section: either a module context or an explicit list.

    ``context`` holds every definition and test module of the section and
    is split by the test pattern.  ``components`` holds component modules
    that each carry their own ``__dependency_resolver__``.  ``errors`` holds
    problems found while collecting those modules (an explicit component
    that failed to import); the builder reports them with its own.
    """
    name: str
    context: ModuleContext | None = None
    components: Sequence[Any] | None = None
    errors: list[BuildError] = field(default_factory=list)

    def __post_init__(self) -> None:
        if (self.context is None) == (self.components is None):
            raise ConfigError(
                f"Section '{self.name}' must declare exactly one of "
                f"'context' or 'components'")

    @property
    def is_context(self) -> bool:
        return self.context is not None


# ── Normalized catalog ─────────────────────────────────────────────

@dataclass
class Meta:
    name: str
    description: str = ""
    prop_types: dict = field(default_factory=dict)


@dataclass(frozen=True)
class TestVariation:
    __test__ = False                    # not a pytest class

    name: str
    renderable: Any


@dataclass(frozen=True)
class Component:
    url: str
    name: str
    description: str
    prop_types: dict
    tests: tuple[TestVariation, ...] = ()
    source: str = ""                    # context key / module name (for error reporting)


@dataclass
class Section:
    name: str
    components: list[Component] = field(default_factory=list)
    is_opened: bool = False             # UI-only, set by search and navigation


@dataclass
class BuildError:
    source: str
    stage: str                          # "load" | "meta" | "url"
    message: str

    def __str__(self) -> str:
        return f"[{self.source}] {self.stage}: {self.message}"


@dataclass
class CatalogResult:
    """Result of building the catalog: sections + any recoverable errors."""
    sections: list[Section]
    errors: list[BuildError]

    @property
    def ok(self) -> bool:
        return len(self.errors) == 0

    def components(self) -> Iterator[Component]:
        for section in self.sections:
            yield from section.components
