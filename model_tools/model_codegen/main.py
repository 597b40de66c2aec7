"""
Model Code Generator - Generates Go (GORM) model structs from a live schema.

Reads column metadata from the database catalog, assembles one model
descriptor per table and renders each through a Jinja template:
- Identity columns ("id") are factored into a shared base model
- Per-table rendering and writing runs in a thread pool
- The base model is written by a detached worker that is never joined
- Each run writes into its own timestamped output directory
"""

from __future__ import annotations

import argparse
import logging
import os
import re
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Final, Iterable, Mapping, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from ..shared import (
    CatalogError,
    CodegenError,
    ColumnMetadata,
    DatabaseCatalog,
    RenderError,
    SchemaCatalog,
    SnapshotCatalog,
    is_identity_column,
    to_pascal_case,
)

logger = logging.getLogger(__name__)

# Type mappings from storage types to Go types
DEFAULT_GO_TYPES: Final[dict[str, str]] = {
    "int": "int",
    "integer": "int",
    "mediumint": "int",
    "smallint": "int",
    "tinyint": "int",
    "bigint": "int64",
    "char": "string",
    "varchar": "string",
    "tinytext": "string",
    "text": "string",
    "mediumtext": "string",
    "longtext": "string",
    "json": "string",
    "float": "float32",
    "double": "float64",
    "decimal": "float64",
    "numeric": "float64",
    "date": "time.Time",
    "datetime": "time.Time",
    "timestamp": "int64",
}
DEFAULT_GO_TYPE: Final[str] = "string"

# Go types that need an extra import in the generated file
TYPE_PACKAGES: Final[dict[str, str]] = {
    "time.Time": "time",
}

ARTIFACT_EXTENSION: Final[str] = ".go"
BASE_MODEL_FILE: Final[str] = "base_model"
BASE_MODEL_NAME: Final[str] = "BaseModel"
DEFAULT_PACKAGE: Final[str] = "global"
DEFAULT_OUTPUT_ROOT: Final[Path] = Path("models")
DIRECTORY_TIMESTAMP: Final[str] = "%Y%m%d%H%M%S"

DSN_ENV: Final[str] = "MODEL_TOOLS_DSN"
OUTPUT_ROOT_ENV: Final[str] = "MODEL_TOOLS_OUTPUT_ROOT"

# Template configuration
TEMPLATE_DIR: Final[Path] = Path(__file__).parent / "templates"
BASE_MODEL_TEMPLATE: Final[str] = "base_model.go.j2"
MODEL_TEMPLATE: Final[str] = "model.go.j2"

_WHITESPACE = re.compile(r"\s+")


def map_type(data_type: str) -> str:
    """Resolve the Go type for a storage type, falling back to string."""
    return DEFAULT_GO_TYPES.get(data_type, DEFAULT_GO_TYPE)


def sanitize_tag_comment(comment: str) -> str:
    """Make a column comment safe inside a quoted struct tag value."""
    return comment.replace('"', "'").replace("\\", "/")


@dataclass(frozen=True, slots=True)
class Field:
    """A generated struct field for one catalog column."""

    name: str
    type: str
    column_name: str
    column_type: str
    column_length: int = 0
    is_null: bool = False
    is_primary_key: bool = False
    default: str | None = None
    comment: str = ""

    @property
    def tag(self) -> str:
        return (
            f'`gorm:"column:{self.column_name};type:{self.column_type};'
            f'size:{self.column_length};comment:{sanitize_tag_comment(self.comment)}"`'
        )

    @property
    def doc(self) -> str:
        """Trailing line comment; newlines would end the Go comment early."""
        return _WHITESPACE.sub(" ", f"{self.name} {self.comment}").strip()


@dataclass(frozen=True, slots=True)
class ModelDescriptor:
    """Everything needed to render one table's model."""

    table: str
    model: str
    fields: tuple[Field, ...] = ()
    embed_base: bool = False
    packages: frozenset[str] = frozenset()

    @property
    def file_name(self) -> str:
        return f"{self.table}{ARTIFACT_EXTENSION}"


@dataclass(frozen=True, slots=True)
class BaseModelDescriptor:
    """The shared identity model embedded by tables with an "id" column."""

    name: str = BASE_MODEL_NAME
    field: str = "ID"
    type: str = "int"
    tag: str = '`gorm:"column:id;primaryKey;autoIncrement;comment:primary key"`'

    @property
    def file_name(self) -> str:
        return f"{BASE_MODEL_FILE}{ARTIFACT_EXTENSION}"


@dataclass(frozen=True, slots=True)
class SchemaModels:
    """Assembled descriptors for one database."""

    models: tuple[ModelDescriptor, ...]
    base: BaseModelDescriptor | None

    def by_table(self) -> dict[str, ModelDescriptor]:
        return {model.table: model for model in self.models}


def _assemble_table(table: str, columns: Iterable[ColumnMetadata]) -> ModelDescriptor:
    fields: list[Field] = []
    packages: set[str] = set()
    has_identity = False

    for column in columns:
        if is_identity_column(column.column):
            has_identity = True
            continue

        go_type = map_type(column.data_type)
        package = TYPE_PACKAGES.get(go_type)
        if package:
            packages.add(package)

        fields.append(
            Field(
                name=to_pascal_case(column.column),
                type=go_type,
                column_name=column.column,
                column_type=column.data_type,
                column_length=column.length,
                is_null=column.nullable,
                is_primary_key=column.is_primary_key,
                default=column.default,
                comment=column.comment,
            )
        )

    return ModelDescriptor(
        table=table,
        model=to_pascal_case(table),
        fields=tuple(fields),
        embed_base=has_identity,
        packages=frozenset(packages),
    )


def assemble(columns: Iterable[ColumnMetadata]) -> SchemaModels:
    """Group catalog columns by table and build one descriptor per table.

    Tables keep their first-seen order and fields keep catalog order, so
    no sorting is needed for catalog output ordered by table and ordinal
    position.

    Raises:
        NamingError: If a table or column name has no name segments.
    """
    grouped: dict[str, list[ColumnMetadata]] = {}
    for column in columns:
        grouped.setdefault(column.table, []).append(column)

    models = tuple(_assemble_table(table, cols) for table, cols in grouped.items())
    base = BaseModelDescriptor() if any(m.embed_base for m in models) else None
    return SchemaModels(models=models, base=base)


@dataclass
class GeneratorContext:
    """Context for code generation with a shared template environment."""

    package: str = DEFAULT_PACKAGE
    template_dir: Path = TEMPLATE_DIR
    template_env: Environment = field(init=False)

    def __post_init__(self) -> None:
        self.template_env = Environment(
            loader=FileSystemLoader(self.template_dir),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            auto_reload=False,
        )

    def render(self, template_name: str, context: str, **args: object) -> str:
        """Render a template, keeping any output produced before a failure.

        Raises:
            RenderError: If the template cannot be loaded, parsed or executed.
                ``partial`` carries the output rendered so far.
        """
        chunks: list[str] = []
        try:
            template = self.template_env.get_template(template_name)
            for chunk in template.generate(package=self.package, **args):
                chunks.append(chunk)
        except TemplateError as e:
            raise RenderError(
                f"Template {template_name} failed: {e}",
                context,
                partial="".join(chunks),
            ) from e
        return "".join(chunks)


def render_model(model: ModelDescriptor, ctx: GeneratorContext) -> str:
    """Render the source for one table's model."""
    return ctx.render(
        MODEL_TEMPLATE,
        model.table,
        model=model.model,
        table=model.table,
        fields=model.fields,
        packages=sorted(model.packages),
        base_model=BASE_MODEL_NAME if model.embed_base else "",
    )


def render_base_model(base: BaseModelDescriptor, ctx: GeneratorContext) -> str:
    """Render the source for the shared base model."""
    return ctx.render(
        BASE_MODEL_TEMPLATE,
        base.name,
        name=base.name,
        field=base.field,
        type=base.type,
        tag=base.tag,
    )


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    """Settings for one generation run."""

    output_root: Path = DEFAULT_OUTPUT_ROOT
    package: str = DEFAULT_PACKAGE
    parallel: bool = True
    max_workers: int | None = None


@dataclass(frozen=True, slots=True)
class UnitResult:
    """Outcome of one per-table unit."""

    table: str
    path: Path
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a generation run.

    ``base_future`` is the detached base model unit, or None when no table
    has an identity column. The run does not wait for it.
    """

    output_dir: Path
    units: tuple[UnitResult, ...]
    base_future: Future[Path] | None = None

    @property
    def failed(self) -> tuple[UnitResult, ...]:
        return tuple(unit for unit in self.units if not unit.ok)


def output_dir_for(root: Path, moment: datetime | None = None) -> Path:
    """Return the timestamped output directory for a run."""
    moment = moment or datetime.now()
    return root / moment.strftime(DIRECTORY_TIMESTAMP)


def _emit_model(
    model: ModelDescriptor,
    output_dir: Path,
    ctx: GeneratorContext,
) -> UnitResult:
    """Render and write a single table model.

    Failures are logged and returned, never raised. A render failure still
    writes whatever was rendered before it.
    """
    output_path = output_dir / model.file_name
    error: Exception | None = None

    try:
        content = render_model(model, ctx)
    except RenderError as e:
        logger.error("Template error: %s", e)
        content = e.partial
        error = e

    try:
        output_path.write_text(content, encoding="utf-8")
    except (OSError, ValueError) as e:
        logger.error("Failed to write %s: %s", output_path, e)
        return UnitResult(model.table, output_path, e)

    if error is None:
        logger.info("Generated %s", output_path)
    return UnitResult(model.table, output_path, error)


def _emit_base_model(
    base: BaseModelDescriptor,
    output_dir: Path,
    ctx: GeneratorContext,
) -> Path:
    output_path = output_dir / base.file_name
    output_path.write_text(render_base_model(base, ctx), encoding="utf-8")
    return output_path


def _log_base_outcome(future: Future[Path]) -> None:
    error = future.exception()
    if error is not None:
        logger.error("Failed to generate base model: %s", error)
    else:
        logger.info("Generated %s", future.result())


def _start_base_model(
    base: BaseModelDescriptor,
    output_dir: Path,
    ctx: GeneratorContext,
) -> Future[Path]:
    """Run the base model unit on its own worker without waiting for it."""
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="base-model")
    future = executor.submit(_emit_base_model, base, output_dir, ctx)
    future.add_done_callback(_log_base_outcome)
    # Submitted work still runs; only the wait is skipped.
    executor.shutdown(wait=False)
    return future


def emit(
    schema: SchemaModels,
    output_dir: Path,
    ctx: GeneratorContext,
    parallel: bool = True,
    max_workers: int | None = None,
) -> GenerationResult:
    """Write all models into an existing output directory.

    Returns once every per-table unit has finished; the base model unit may
    still be running.
    """
    base_future: Future[Path] | None = None
    if schema.base is not None:
        base_future = _start_base_model(schema.base, output_dir, ctx)
    else:
        logger.info("No table has an identity column, skipping base model")

    units: list[UnitResult] = []
    if parallel and len(schema.models) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(_emit_model, model, output_dir, ctx)
                for model in schema.models
            ]
            for future in as_completed(futures):
                units.append(future.result())
    else:
        for model in schema.models:
            units.append(_emit_model(model, output_dir, ctx))

    units.sort(key=lambda unit: unit.table)
    return GenerationResult(
        output_dir=output_dir,
        units=tuple(units),
        base_future=base_future,
    )


def generate(
    catalog: SchemaCatalog,
    config: GeneratorConfig | None = None,
) -> GenerationResult:
    """Generate Go models for the catalog's current database.

    Args:
        catalog: Source of column metadata.
        config: Run settings; defaults are used when omitted.

    Returns:
        The run result, with one unit per table.

    Raises:
        CatalogError: If the catalog cannot be read. Nothing is written.
        NamingError: If a table or column name cannot be converted.
        OSError: If the output directory cannot be created.
    """
    config = config or GeneratorConfig()

    database = catalog.current_database()
    columns = catalog.columns(database)
    logger.info("Read %d column(s) from database %s", len(columns), database)

    schema = assemble(columns)

    # Created before any unit starts, the base model unit included.
    output_dir = output_dir_for(config.output_root)
    output_dir.mkdir(parents=True, exist_ok=True)

    ctx = GeneratorContext(package=config.package)
    return emit(
        schema,
        output_dir,
        ctx,
        parallel=config.parallel,
        max_workers=config.max_workers,
    )


def open_catalog(dsn: str | None, snapshot: Path | None) -> SchemaCatalog:
    """Open a snapshot file if given, otherwise the database at ``dsn``."""
    if snapshot is not None:
        return SnapshotCatalog.from_path(snapshot)
    if not dsn:
        raise CatalogError(
            f"No database URL configured; pass --dsn or set {DSN_ENV}"
        )
    return DatabaseCatalog.from_url(dsn)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def add_catalog_arguments(
    parser: argparse.ArgumentParser,
    environ: Mapping[str, str] = os.environ,
) -> None:
    parser.add_argument(
        "--dsn",
        default=environ.get(DSN_ENV),
        help=f"SQLAlchemy database URL (default: ${DSN_ENV})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Generate Go model structs from a database schema",
    )
    add_catalog_arguments(parser)
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Read the catalog from a YAML snapshot instead of the database",
    )
    parser.add_argument(
        "--output-root",
        type=Path,
        default=Path(os.environ.get(OUTPUT_ROOT_ENV, DEFAULT_OUTPUT_ROOT)),
        help="Directory that receives the timestamped output directory",
    )
    parser.add_argument(
        "--package",
        default=DEFAULT_PACKAGE,
        help="Go package name of the generated files",
    )
    parser.add_argument(
        "--no-parallel",
        action="store_true",
        help="Disable parallel processing",
    )
    parser.add_argument(
        "--workers",
        type=positive_int,
        default=None,
        help="Maximum number of parallel workers",
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    config = GeneratorConfig(
        output_root=args.output_root,
        package=args.package,
        parallel=not args.no_parallel,
        max_workers=args.workers,
    )

    try:
        catalog = open_catalog(args.dsn, args.snapshot)
        try:
            result = generate(catalog, config)
        finally:
            catalog.close()
    except (CodegenError, OSError) as e:
        raise SystemExit(f"Error: {e}") from e

    failed = len(result.failed)
    print(
        f"Generated {len(result.units) - failed} model(s) into {result.output_dir}"
        + (f" ({failed} failed)" if failed else "")
    )


if __name__ == "__main__":
    main()
