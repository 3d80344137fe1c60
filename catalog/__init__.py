"""Read-only command catalog: storage access, row shaping and error types."""

from .errors import CatalogError, ValidationError, NotFoundError, StorageUnavailableError
from .categories import CATEGORY_NAMES, UNKNOWN_CATEGORY, category_name, category_code
from .sqlite_adapter import CommandCatalog, REQUIRED_TABLES, parse_command_id

__all__ = [
    'CatalogError',
    'ValidationError',
    'NotFoundError',
    'StorageUnavailableError',
    'CATEGORY_NAMES',
    'UNKNOWN_CATEGORY',
    'category_name',
    'category_code',
    'CommandCatalog',
    'REQUIRED_TABLES',
    'parse_command_id'
]
