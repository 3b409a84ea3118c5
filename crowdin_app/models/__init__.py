"""Crowdin app database models."""

from .base import Base
from .organization import Organization

__all__ = [
    "Base",
    "Organization",
]
