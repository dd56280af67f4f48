"""Component catalog — build, normalize and serialize documented components."""

from .models import (
    RawSection, Meta, TestVariation, Component, Section,
    BuildError, CatalogResult, ConfigError,
)
from .builder import build_catalog, build_sections, encode_url, META_ATTR, RESOLVER_ATTR
from .serialization import catalog_to_dict, section_to_dict, component_to_dict

__all__ = [
    # Models
    "RawSection", "Meta", "TestVariation", "Component", "Section",
    "BuildError", "CatalogResult", "ConfigError",
    # Builder
    "build_catalog", "build_sections", "encode_url", "META_ATTR", "RESOLVER_ATTR",
    # Serialization
    "catalog_to_dict", "section_to_dict", "component_to_dict",
]
