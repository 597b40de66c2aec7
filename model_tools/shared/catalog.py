"""Schema catalog access.

A catalog supplies the current database name and the ordered column
metadata for every table in it. ``DatabaseCatalog`` reads a live MySQL
``information_schema`` through SQLAlchemy; snapshot files are handled in
:mod:`model_tools.shared.snapshot`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .errors import CatalogError

logger = logging.getLogger(__name__)

CURRENT_DATABASE_QUERY = text("SELECT DATABASE()")

COLUMNS_QUERY = text(
    """
    SELECT
        table_name AS table_name,
        column_name AS column_name,
        column_default AS column_default,
        is_nullable AS is_nullable,
        data_type AS data_type,
        character_maximum_length AS data_length,
        column_key AS column_key,
        column_comment AS column_comment
    FROM information_schema.COLUMNS
    WHERE table_schema = :schema
    ORDER BY table_name, ordinal_position
    """
)


@dataclass(frozen=True, slots=True)
class ColumnMetadata:
    """One column of one table, as reported by the catalog."""

    table: str
    column: str
    default: str | None = None
    nullable: bool = False
    data_type: str = ""
    length: int = 0
    key: str = ""
    comment: str = ""

    @property
    def is_primary_key(self) -> bool:
        return self.key == "PRI"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ColumnMetadata:
        """Build a record from an ``information_schema.COLUMNS`` row."""
        length = row.get("data_length")
        default = row.get("column_default")
        return cls(
            table=str(row["table_name"]),
            column=str(row["column_name"]),
            default=None if default is None else str(default),
            nullable=str(row.get("is_nullable") or "").upper() == "YES",
            data_type=str(row.get("data_type") or "").lower(),
            length=int(length) if length is not None else 0,
            key=str(row.get("column_key") or ""),
            comment=str(row.get("column_comment") or ""),
        )


class SchemaCatalog(Protocol):
    """Read-only view of a database catalog."""

    def current_database(self) -> str:
        ...

    def columns(self, schema: str) -> Sequence[ColumnMetadata]:
        """Return column metadata ordered by table name, then ordinal position."""
        ...

    def close(self) -> None:
        ...


class DatabaseCatalog:
    """SchemaCatalog backed by a live database connection."""

    __slots__ = ("_engine",)

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_url(cls, url: str) -> DatabaseCatalog:
        """Create a catalog from a SQLAlchemy database URL.

        Raises:
            CatalogError: If the URL is invalid or its driver is unavailable.
        """
        try:
            engine = create_engine(url, pool_pre_ping=True)
        except (SQLAlchemyError, ImportError) as e:
            raise CatalogError(f"Cannot create database engine: {e}") from e
        return cls(engine)

    def current_database(self) -> str:
        try:
            with self._engine.connect() as conn:
                name = conn.execute(CURRENT_DATABASE_QUERY).scalar()
        except SQLAlchemyError as e:
            raise CatalogError(f"Failed to query current database: {e}") from e
        if not name:
            raise CatalogError("Connection has no current database selected")
        return str(name)

    def columns(self, schema: str) -> list[ColumnMetadata]:
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(COLUMNS_QUERY, {"schema": schema}).mappings().all()
        except SQLAlchemyError as e:
            raise CatalogError(f"Failed to query column metadata: {e}", schema) from e
        logger.debug("Fetched %d column(s) from schema %s", len(rows), schema)
        return [ColumnMetadata.from_row(row) for row in rows]

    def close(self) -> None:
        self._engine.dispose()
