"""Backfill derived location fields and `search_text` on eligibility_documents.

Rows stored before the search columns existed have empty `search_text`
and no location, so they are invisible to every text stage. This script
recomputes both from the stored `eligibility_json`; `search_tsv` follows
automatically because Postgres generates it from `search_text`.

Usage:
  python backfill_search_text.py

Safe to re-run.
"""

from __future__ import annotations

from pydantic import ValidationError

from app.db.database import get_db_context
from app.db.migrations import run_migrations
from app.db.models import EligibilityDocument
from app.ingestion.service import apply_search_fields
from app.schemas.eligibility import Eligibility
from app.utils.logging import get_logger

logger = get_logger("eligibility.scripts.backfill_search_text")


def main() -> None:
    run_migrations()

    with get_db_context() as db:
        documents = db.query(EligibilityDocument).all()
        updated = 0
        skipped = 0

        for document in documents:
            payload = dict(document.eligibility_json or {})
            payload.setdefault("rawEligibilityText", document.raw_eligibility_text or "")
            try:
                eligibility = Eligibility.model_validate(payload)
            except ValidationError as exc:
                logger.warning("Skipping %s: stored eligibility is invalid (%s)", document.id, exc.error_count())
                skipped += 1
                continue

            if apply_search_fields(document, eligibility):
                updated += 1

        print(
            f"Backfill complete: updated {updated} of {len(documents)} records; "
            f"skipped {skipped} with invalid eligibility data."
        )


if __name__ == "__main__":
    main()
