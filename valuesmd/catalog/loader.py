from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

import yaml
from pydantic import ValidationError

from ..config import get_settings
from ..errors import ConfigurationError
from ..observability import get_logger
from .models import Catalog

log = get_logger(__name__)

DEFAULT_CATALOG_PATH = os.path.join(os.path.dirname(__file__), "data", "catalog.yml")


def load_catalog(path: Optional[str] = None) -> Catalog:
    """Read and validate a catalog YAML file.

    Any problem with the file (missing, malformed YAML, dangling motif
    references) is a ``ConfigurationError``: the service cannot start without
    a consistent catalog.
    """
    path = path or DEFAULT_CATALOG_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot read catalog {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"catalog {path} is not valid YAML: {e}")
    if not isinstance(data, dict):
        raise ConfigurationError(f"catalog {path} must be a mapping at the top level")

    try:
        catalog = Catalog.from_dict(data)
    except ValidationError as e:
        raise ConfigurationError(f"catalog {path} is invalid: {e}")

    log.info(
        "catalog_loaded",
        path=path,
        frameworks=len(catalog.frameworks),
        motifs=len(catalog.motifs),
        dilemmas=len(catalog.dilemmas),
    )
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """The process-wide catalog, loaded once from ``VALUES_CATALOG_PATH`` or the bundled file."""
    return load_catalog(get_settings().catalog_path)
