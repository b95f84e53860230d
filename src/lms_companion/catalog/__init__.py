"""Phone-side catalog models and loader exports."""

from .loader import CatalogLoadError, CatalogLoader, load_catalog
from .models import Assignment, Catalog, Course, GradeEntry, Quiz

__all__ = [
    "Assignment",
    "Catalog",
    "CatalogLoadError",
    "CatalogLoader",
    "Course",
    "GradeEntry",
    "Quiz",
    "load_catalog",
]
