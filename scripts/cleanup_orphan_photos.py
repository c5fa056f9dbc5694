"""
Orphan photo cleanup
--------------------
Removes public photo files that no photo row references, and staging
batches left behind by interrupted submissions.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.logging import setup_logging
from app.db.session import SessionLocal
from app.models.photo import Photo
from app.services.photos import get_photo_storage
from utils.photo_storage import PUBLIC_URL_PREFIX

logger = logging.getLogger("cleanup_orphan_photos")

# staging batches younger than this may belong to an in-flight request
DEFAULT_STAGING_AGE_SECONDS = 3600


def referenced_filenames(db: Session) -> set[str]:
    prefix = f"{PUBLIC_URL_PREFIX}/"
    return {
        url[len(prefix):]
        for url in db.execute(select(Photo.url)).scalars()
        if url and url.startswith(prefix)
    }


def cleanup(db: Session, storage, dry_run: bool = False, staging_age: float = DEFAULT_STAGING_AGE_SECONDS) -> tuple[list[str], list[str]]:
    """Return (orphan filenames, stale batch ids), deleting them unless ``dry_run``."""
    referenced = referenced_filenames(db)
    orphans = [name for name in storage.list_public() if name not in referenced]
    stale_batches = storage.list_staged_batches(older_than_seconds=staging_age)

    for name in orphans:
        logger.info("%s orphan photo %s", "Would delete" if dry_run else "Deleting", name)
        if not dry_run:
            storage.delete_public(name)
    for batch_id in stale_batches:
        logger.info("%s stale staging batch %s", "Would remove" if dry_run else "Removing", batch_id)
        if not dry_run:
            storage.remove_staged_batch(batch_id)

    return orphans, stale_batches


def main() -> None:
    parser = argparse.ArgumentParser(description="Remove fotos sem registro no banco")
    parser.add_argument("--dry-run", action="store_true", help="apenas lista o que seria removido")
    parser.add_argument(
        "--staging-age",
        type=float,
        default=DEFAULT_STAGING_AGE_SECONDS,
        help="idade minima (s) de um lote em staging para remocao",
    )
    args = parser.parse_args()
    setup_logging()

    db = SessionLocal()
    try:
        orphans, stale = cleanup(db, get_photo_storage(), dry_run=args.dry_run, staging_age=args.staging_age)
        print(f"🧹 fotos orfas: {len(orphans)} | lotes em staging: {len(stale)}" + (" (dry-run)" if args.dry_run else ""))
    finally:
        db.close()


if __name__ == "__main__":
    main()
