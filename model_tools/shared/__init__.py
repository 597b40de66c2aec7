"""Shared utilities for model tools."""

from .catalog import (
    ColumnMetadata,
    DatabaseCatalog,
    SchemaCatalog,
)
from .errors import (
    CatalogError,
    CodegenError,
    NamingError,
    RenderError,
)
from .naming import (
    is_identity_column,
    to_pascal_case,
)
from .snapshot import (
    SnapshotCatalog,
    dump_snapshot,
    load_snapshot,
)

__all__ = [
    # Catalog access
    "ColumnMetadata",
    "DatabaseCatalog",
    "SchemaCatalog",
    "SnapshotCatalog",
    "dump_snapshot",
    "load_snapshot",
    # Naming utilities
    "is_identity_column",
    "to_pascal_case",
    # Errors
    "CatalogError",
    "CodegenError",
    "NamingError",
    "RenderError",
]
