"""Annotation performance dashboard over spreadsheet-backed sources."""

__version__ = "1.0.0"
