# app/infra/init_db.py

import argparse

from sqlalchemy import inspect

from app.core.config import Settings, get_settings
from app.infra.postgres import build_engine, init_db


def main(argv=None, settings: Settings = None) -> list:
    """Create (or with --drop, recreate) the schema and print the tables."""
    parser = argparse.ArgumentParser(description="Create the review shop database tables")
    parser.add_argument("--drop", action="store_true", help="drop all tables first")
    args = parser.parse_args(argv)

    settings = settings or get_settings()
    engine = build_engine(settings.database_url)
    try:
        init_db(engine, drop=args.drop)

        inspector = inspect(engine)
        tables = inspector.get_table_names()
        print(f"Created tables: {tables}")
        for table in tables:
            print(f"\n{table}:")
            for col in inspector.get_columns(table):
                print(f"  - {col['name']}: {col['type']}")
        return tables
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
