from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for p in (REPO_ROOT, REPO_ROOT / "src" / "meal_settlement_system"):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from config import get_settings_module

from meal_settlement_system.database.bootstrap import apply_schema, apply_seed_sql, list_tables


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply database/schema.sql (and optionally seed.sql).")
    parser.add_argument("--seed", action="store_true", help="also load demo groups and children")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    database_dir = REPO_ROOT / "database"
    apply_schema(db_config, schema_path=database_dir / "schema.sql")
    if args.seed:
        apply_seed_sql(db_config, seed_path=database_dir / "seed.sql")

    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)}, seeded={args.seed})"
    )


if __name__ == "__main__":
    main()
