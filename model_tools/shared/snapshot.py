"""YAML catalog snapshots.

A snapshot freezes the output of a live catalog so generation can be
repeated offline::

    database: shop
    columns:
      - table: users
        column: id
        data_type: int
        key: PRI
      - table: users
        column: user_name
        data_type: varchar
        length: 64
"""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from .catalog import ColumnMetadata, SchemaCatalog
from .errors import CatalogError

_COLUMN_FIELDS: frozenset[str] = frozenset(
    ("table", "column", "default", "nullable", "data_type", "length", "key", "comment")
)


def load_snapshot(snapshot_path: Path) -> dict[str, Any]:
    """Load a snapshot file.

    Args:
        snapshot_path: Path to the YAML snapshot.

    Returns:
        The parsed snapshot mapping.

    Raises:
        CatalogError: If the file cannot be read or parsed.
    """
    try:
        content = snapshot_path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Failed to read snapshot file: {e}", str(snapshot_path)) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML: {e}", str(snapshot_path)) from e

    if not isinstance(data, dict):
        raise CatalogError("Snapshot root must be a mapping", str(snapshot_path))

    return data


_TRUE_STRINGS: frozenset[str] = frozenset(("yes", "true"))
_FALSE_STRINGS: frozenset[str] = frozenset(("no", "false", ""))


def _parse_nullable(value: Any, index: int, source: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise CatalogError(
        f"Column entry #{index} has a non-boolean nullable: {value!r}", source
    )


def _parse_length(value: Any, index: int, source: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise CatalogError(f"Column entry #{index} has a non-integer length", source)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise CatalogError(
            f"Column entry #{index} has a non-integer length", source
        ) from e


def _column_from_entry(entry: Any, index: int, source: str) -> ColumnMetadata:
    if not isinstance(entry, dict):
        raise CatalogError(f"Column entry #{index} must be a mapping", source)
    missing = [name for name in ("table", "column") if not entry.get(name)]
    if missing:
        raise CatalogError(
            f"Column entry #{index} is missing {', '.join(missing)}", source
        )
    unknown = set(entry) - _COLUMN_FIELDS
    if unknown:
        raise CatalogError(
            f"Column entry #{index} has unknown key(s): {', '.join(sorted(unknown))}",
            source,
        )

    default = entry.get("default")
    return ColumnMetadata(
        table=str(entry["table"]),
        column=str(entry["column"]),
        default=None if default is None else str(default),
        nullable=_parse_nullable(entry.get("nullable", False), index, source),
        data_type=str(entry.get("data_type") or "").lower(),
        length=_parse_length(entry.get("length"), index, source),
        key=str(entry.get("key") or ""),
        comment=str(entry.get("comment") or ""),
    )


class SnapshotCatalog:
    """SchemaCatalog backed by a YAML snapshot file."""

    __slots__ = ("_database", "_columns")

    def __init__(self, database: str, columns: list[ColumnMetadata]) -> None:
        self._database = database
        # Stable sort: per-table entries keep their file order.
        self._columns = sorted(columns, key=lambda col: col.table)

    @classmethod
    def from_path(cls, path: Path) -> SnapshotCatalog:
        data = load_snapshot(path)
        source = str(path)

        database = data.get("database")
        if not database:
            raise CatalogError("Snapshot must provide a 'database' name", source)

        entries = data.get("columns", [])
        if not isinstance(entries, list):
            raise CatalogError("Snapshot must provide a 'columns' list", source)

        columns = [
            _column_from_entry(entry, index, source)
            for index, entry in enumerate(entries)
        ]
        return cls(str(database), columns)

    def current_database(self) -> str:
        return self._database

    def columns(self, schema: str) -> list[ColumnMetadata]:
        if schema != self._database:
            raise CatalogError(f"Snapshot only contains schema {self._database!r}", schema)
        return list(self._columns)

    def close(self) -> None:
        pass


def dump_snapshot(catalog: SchemaCatalog, path: Path) -> int:
    """Write the catalog's current database to a snapshot file.

    Returns:
        Number of column records written.
    """
    database = catalog.current_database()
    columns = catalog.columns(database)
    data = {
        "database": database,
        "columns": [asdict(column) for column in columns],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(data, sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    return len(columns)
