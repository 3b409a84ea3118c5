"""Crowdin custom file format app: JSON string extraction, rebuild, and org token handling."""

__version__ = "0.1.0"
