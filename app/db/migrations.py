"""
Idempotent startup migrations for the eligibility_documents table.

Tables created before the search columns existed get them added here;
fresh databases are handled by ``Base.metadata.create_all()``.
"""
from sqlalchemy import inspect, text

from app.db.database import engine
from app.utils.logging import get_logger

logger = get_logger("eligibility.db.migrations")

TABLE = "eligibility_documents"

_LOCATION_AND_SEARCH_COLUMNS = {
    "source_type": "TEXT NOT NULL DEFAULT 'pdf'",
    "source_url": "TEXT",
    "page_title": "TEXT",
    "location_city": "TEXT",
    "location_county": "TEXT",
    "location_state": "TEXT",
    "search_text": "TEXT NOT NULL DEFAULT ''",
}


def ensure_extensions():
    """pg_trgm backs the fuzzy-similarity stage and the trigram index."""
    with engine.connect() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))
        conn.commit()


def migrate_eligibility_documents_table():
    """
    Add missing source, location and search columns to an existing
    eligibility_documents table.
    """
    inspector = inspect(engine)

    if TABLE not in inspector.get_table_names():
        return  # Table doesn't exist, will be created by create_all()

    existing_columns = {col["name"] for col in inspector.get_columns(TABLE)}

    with engine.connect() as conn:
        for name, ddl in _LOCATION_AND_SEARCH_COLUMNS.items():
            if name not in existing_columns:
                logger.info("Adding '%s' column to %s table...", name, TABLE)
                conn.execute(text(f"ALTER TABLE {TABLE} ADD COLUMN {name} {ddl}"))
                conn.commit()

        # Generated column: always recomputed by Postgres from search_text
        if "search_tsv" not in existing_columns:
            logger.info("Adding generated 'search_tsv' column to %s table...", TABLE)
            conn.execute(text(
                f"ALTER TABLE {TABLE} ADD COLUMN search_tsv tsvector "
                "GENERATED ALWAYS AS (to_tsvector('english', search_text)) STORED"
            ))
            conn.commit()


def migrate_search_indexes():
    """Create the search indexes on tables that predate them."""
    inspector = inspect(engine)
    if TABLE not in inspector.get_table_names():
        return

    with engine.connect() as conn:
        conn.execute(text(
            f"CREATE INDEX IF NOT EXISTS ix_eligibility_documents_search_tsv "
            f"ON {TABLE} USING gin (search_tsv)"
        ))
        conn.execute(text(
            f"CREATE INDEX IF NOT EXISTS ix_eligibility_documents_search_text_trgm "
            f"ON {TABLE} USING gin (search_text gin_trgm_ops)"
        ))
        conn.execute(text(
            f"CREATE INDEX IF NOT EXISTS ix_eligibility_documents_created_at "
            f"ON {TABLE} (created_at)"
        ))
        conn.commit()


def run_migrations():
    """
    Run all migrations.
    """
    logger.info("Running database migrations...")
    ensure_extensions()
    migrate_eligibility_documents_table()
    migrate_search_indexes()
    logger.info("Migrations complete!")
