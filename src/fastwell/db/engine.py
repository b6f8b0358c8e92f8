"""Database engine setup and initialization."""

import logging
from pathlib import Path

import aiosqlite

from ..config import DATA_DIR

logger = logging.getLogger(__name__)

# Version stamped into documents written before versioning existed
BASELINE_SCHEMA_VERSION = 1


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "fastwell.db"


async def _run_migrations(db: aiosqlite.Connection) -> None:
    """Run database migrations for schema updates."""
    cursor = await db.execute("PRAGMA table_info(documents)")
    columns = await cursor.fetchall()
    column_names = {col[1] for col in columns}

    # Early databases only tracked creation time
    if "updated_at" not in column_names:
        await db.execute("ALTER TABLE documents ADD COLUMN updated_at TIMESTAMP")
        await db.execute("UPDATE documents SET updated_at = created_at")

    # Stamp unversioned documents so loaders can migrate them by version
    cursor = await db.execute(
        """
        UPDATE documents
        SET data = json_set(data, '$.schemaVersion', ?)
        WHERE json_extract(data, '$.schemaVersion') IS NULL
        """,
        (BASELINE_SCHEMA_VERSION,),
    )
    if cursor.rowcount:
        logger.info("Stamped %d unversioned documents", cursor.rowcount)

    await db.commit()


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(db_path) as db:
        # All collections share one table; each row is one JSON document
        await db.execute("""
            CREATE TABLE IF NOT EXISTS documents (
                collection TEXT NOT NULL,
                id TEXT NOT NULL,
                user_id TEXT,
                data TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (collection, id)
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_documents_user
            ON documents(collection, user_id)
        """)

        await db.commit()

        # Run migrations for existing databases
        await _run_migrations(db)
