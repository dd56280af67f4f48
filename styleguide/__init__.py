"""Styleguide: browse documented UI components by section, hash and search."""

__version__ = "0.1.0"
