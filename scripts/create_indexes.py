"""
Search index creation (PostgreSQL)
----------------------------------
Trigram indexes back the case-insensitive substring filters; btree indexes
back the exact-match and ordering columns.
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import engine

TRIGRAM_COLUMNS = ("name", "address", "description", "street", "neighborhood", "city", "complement", "number")
BTREE_INDEXES = {
    "places_category_idx": "places (category)",
    "places_region_idx": "places (region)",
    "places_postal_code_idx": "places (postal_code)",
    "places_created_at_idx": "places (created_at DESC, id DESC)",
    "place_features_feature_id_idx": "place_features (feature_id)",
    "reviews_place_id_idx": "reviews (place_id, created_at DESC)",
    "favorites_place_id_idx": "favorites (place_id)",
}


def _statements() -> list[tuple[str, str]]:
    statements = [("pg_trgm extension", "CREATE EXTENSION IF NOT EXISTS pg_trgm")]
    for column in TRIGRAM_COLUMNS:
        name = f"places_{column}_trgm_idx"
        statements.append(
            (name, f"CREATE INDEX IF NOT EXISTS {name} ON places USING gin ({column} gin_trgm_ops)")
        )
    for name, target in BTREE_INDEXES.items():
        statements.append((name, f"CREATE INDEX IF NOT EXISTS {name} ON {target}"))
    return statements


def create_indexes() -> None:
    """Create search indexes; one failing index does not stop the rest."""
    if engine.dialect.name != "postgresql":
        raise SystemExit(f"Indices de busca exigem PostgreSQL (dialeto atual: {engine.dialect.name}).")

    print("🔧 Criando indices de busca...")
    with engine.connect() as conn:
        for label, statement in _statements():
            print(f"  - {label}")
            try:
                conn.execute(text(statement))
                conn.commit()
            except SQLAlchemyError as exc:
                print(f"  ⚠️  falha em {label}: {exc}")
                conn.rollback()

        print("\n📋 Indices existentes:")
        result = conn.execute(text("""
            SELECT indexname, tablename
            FROM pg_indexes
            WHERE schemaname = 'public'
            AND tablename IN ('places', 'place_features', 'reviews', 'favorites')
            ORDER BY tablename, indexname;
        """))
        for row in result:
            print(f"  - {row[1]}.{row[0]}")


if __name__ == "__main__":
    create_indexes()
