"""File I/O related utilities.

This package groups small modules that locate sources for diagnostics and render
coverage reports to text.
"""

from .source_location import SourceLocation, lookup_source, capture_location, format_source
from .template_renderer import TemplateRenderer

__all__ = [
    "SourceLocation",
    "lookup_source",
    "capture_location",
    "format_source",
    "TemplateRenderer",
]
