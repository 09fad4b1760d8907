"""Static somatic practice catalog"""

from engagement.catalog.practices import (
    CATALOG_SIZE,
    PRACTICE_CATALOG,
    get_practice,
    practices_in,
    seed_practice_catalog,
)

__all__ = [
    "CATALOG_SIZE",
    "PRACTICE_CATALOG",
    "get_practice",
    "practices_in",
    "seed_practice_catalog",
]
