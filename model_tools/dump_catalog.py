#!/usr/bin/env python3
"""
Dump the live schema catalog to a YAML snapshot.

The snapshot can later be fed to ``generate --snapshot`` to regenerate
models without a database connection.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .model_codegen.main import add_catalog_arguments, configure_logging, open_catalog
from .shared import CodegenError, dump_snapshot

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Write the current database's column metadata to a YAML file",
    )
    parser.add_argument("output", type=Path, help="Snapshot file to write")
    add_catalog_arguments(parser)

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        catalog = open_catalog(args.dsn, None)
        try:
            count = dump_snapshot(catalog, args.output)
        finally:
            catalog.close()
    except (CodegenError, OSError) as e:
        raise SystemExit(f"Error: {e}") from e

    print(f"Wrote {count} column(s) to {args.output}")


if __name__ == "__main__":
    main()
