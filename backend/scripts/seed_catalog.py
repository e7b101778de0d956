#!/usr/bin/env python3
"""
seed_catalog.py: thin CLI wrapper for CatalogService.seed_from_yaml.

Creates the tables when they are missing (sqlite only) and loads the
photographer/service/package catalog. Rows that already exist by id are
left untouched, so the script is safe to re-run.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --path my_catalog.yaml --database-url sqlite:///./dev.db
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from weddinglens import models  # noqa: E402,F401
from weddinglens.core.config import settings  # noqa: E402
from weddinglens.database import Base  # noqa: E402
from weddinglens.services.catalog_service import DEFAULT_SEED_PATH, CatalogService  # noqa: E402

logger = logging.getLogger("seed_catalog")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed the WeddingLens catalog from YAML.")
    parser.add_argument(
        "--path",
        type=Path,
        default=DEFAULT_SEED_PATH,
        help=f"Catalog YAML file (default: {DEFAULT_SEED_PATH.name})",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Database URL (default: DATABASE_URL from settings)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    args = build_parser().parse_args(argv)

    db_url = args.database_url or settings.get_database_url()
    engine = create_engine(db_url)
    if db_url.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)

    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        stats = CatalogService(session).seed_from_yaml(args.path)
    finally:
        session.close()
        engine.dispose()

    for section, created in stats.items():
        print(f"  + {created:3d} {section}")
    print(f"Catalog seeded from {args.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
