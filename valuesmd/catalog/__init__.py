from .models import CHOICES, Catalog, Dilemma, Framework, Motif
from .loader import DEFAULT_CATALOG_PATH, get_catalog, load_catalog

__all__ = [
    "CHOICES",
    "Catalog",
    "Dilemma",
    "Framework",
    "Motif",
    "DEFAULT_CATALOG_PATH",
    "get_catalog",
    "load_catalog",
]
