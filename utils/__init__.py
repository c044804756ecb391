"""Utility modules for po-auto-translate."""

from .catalog import Catalog, CatalogEntry, parse_catalog, serialize_catalog
from .file_handler import load_catalog_file, save_catalog_file
from .validators import is_throttling_error, parse_retry_after
from .rate_limiter import RateLimiter, get_default_limits
from .batch_manager import BatchManager, split_batches

__all__ = [
    'Catalog',
    'CatalogEntry',
    'parse_catalog',
    'serialize_catalog',
    'load_catalog_file',
    'save_catalog_file',
    'is_throttling_error',
    'parse_retry_after',
    'RateLimiter',
    'get_default_limits',
    'BatchManager',
    'split_batches',
]
