"""
Place bulk loader
-----------------
Reads a places.jsonl file and submits every record through the same
creation path the API uses (validation, feature registry, photo ingestion).

Each line is a place payload in camelCase or snake_case. Photos can be given
inline as data URLs (``photos``) or as image paths relative to the JSONL file
(``photoFiles``).
"""

from __future__ import annotations

import argparse
import base64
import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Any, Iterator

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

from app.core.errors import StorageError, ValidationError
from app.core.logging import setup_logging
from app.db.session import SessionLocal
from app.schemas.place import PlaceCreate
from app.services.photos import PhotoStorage, get_photo_storage
from app.services.places import create_place

logger = logging.getLogger("load_places")


def iter_jsonl(path: Path) -> Iterator[tuple[int, dict[str, Any]]]:
    """Yield (line number, record); blank and malformed lines are skipped."""
    with path.open("r", encoding="utf-8") as fp:
        for line_no, line in enumerate(fp, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("[SKIP] linha %d: JSON invalido", line_no)
                continue
            if isinstance(record, dict):
                yield line_no, record


def file_to_data_url(path: Path) -> str:
    mime, _ = mimetypes.guess_type(path.name)
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime or 'application/octet-stream'};base64,{encoded}"


def build_payload(record: dict[str, Any], base_dir: Path) -> PlaceCreate:
    record = dict(record)
    photo_files = record.pop("photoFiles", None) or record.pop("photo_files", None) or []
    photos = record.get("photos")
    photos = list(photos) if isinstance(photos, list) else []
    photos.extend(file_to_data_url(base_dir / name) for name in photo_files)
    record["photos"] = photos
    return PlaceCreate.model_validate(record)


def load_places(jsonl_path: Path, db: Session, storage: PhotoStorage) -> tuple[int, int, int]:
    """Load every record; returns (created, skipped, failed)."""
    created = 0
    skipped = 0
    failed = 0

    for line_no, record in iter_jsonl(jsonl_path):
        try:
            payload = build_payload(record, jsonl_path.parent)
        except (SchemaError, OSError) as exc:
            skipped += 1
            logger.warning("[SKIP] linha %d: %s", line_no, exc)
            continue

        try:
            place = create_place(db, payload, storage)
        except ValidationError as exc:
            skipped += 1
            logger.warning("[SKIP] linha %d: %s (%s)", line_no, exc.message, exc.code)
            continue
        except StorageError as exc:
            failed += 1
            logger.error("[FAIL] linha %d: %s", line_no, exc)
            continue

        created += 1
        logger.debug("linha %d -> local %s", line_no, place.id)
        if created % 10 == 0:
            logger.info("%d locais carregados...", created)

    return created, skipped, failed


def main() -> None:
    parser = argparse.ArgumentParser(description="places.jsonl -> banco de dados")
    parser.add_argument(
        "--file",
        type=Path,
        default=Path("places.jsonl"),
        help="arquivo JSONL de locais (padrao: ./places.jsonl)",
    )
    args = parser.parse_args()
    setup_logging()

    if not args.file.exists():
        raise SystemExit(f"Arquivo nao encontrado: {args.file}")

    db = SessionLocal()
    try:
        print(f"📖 Carregando locais de {args.file}...")
        created, skipped, failed = load_places(args.file, db, get_photo_storage())

        print("\n" + "=" * 60)
        print("Carga concluida")
        print("=" * 60)
        print(f"  criados: {created}")
        print(f"  ignorados: {skipped}")
        print(f"  falhas: {failed}")
        print("=" * 60)
    finally:
        db.close()


if __name__ == "__main__":
    main()
