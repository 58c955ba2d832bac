"""
Exercise catalog for rep-coach.

The catalog is read-only reference data loaded from bundled YAML and
passed explicitly into the filter and selector functions.
"""

from .base import Exercise
from .registry import ExerciseCatalog, get_catalog

__all__ = [
    "Exercise",
    "ExerciseCatalog",
    "get_catalog",
]
