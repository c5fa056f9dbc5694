"""
Database schema initialization
------------------------------
Creates missing tables and lists what exists afterwards.
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

# load the project .env before importing settings
PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import inspect

from app.db.init_db import init_db
from app.db.session import engine


def init_db_schema() -> None:
    """Create every mapped table that does not exist yet."""
    print("🔧 Inicializando o schema do banco...")

    init_db()
    print("✅ Tabelas criadas")

    print("\n📋 Tabelas existentes:")
    for table_name in sorted(inspect(engine).get_table_names()):
        print(f"  - {table_name}")


if __name__ == "__main__":
    init_db_schema()
