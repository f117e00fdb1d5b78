"""Database initialization and connection management."""
import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import aiosqlite

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent / "database" / "migrations"


class Database:
    """Database connection manager."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: Optional[aiosqlite.Connection] = None
        # Transactions and reads take turns on the shared connection
        self._lock = asyncio.Lock()

    async def connect(self) -> aiosqlite.Connection:
        """Establish database connection."""
        if self._conn is None:
            # Ensure data directory exists
            db_dir = Path(self.db_path).parent
            db_dir.mkdir(parents=True, exist_ok=True)

            # Autocommit mode: transactions are opened explicitly by transaction()
            self._conn = await aiosqlite.connect(self.db_path, isolation_level=None)
            self._conn.row_factory = aiosqlite.Row
            # Enable foreign keys
            await self._conn.execute("PRAGMA foreign_keys = ON")

        return self._conn

    async def close(self):
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Run the enclosed statements as one atomic unit of work.

        BEGIN IMMEDIATE takes the write lock up front, so other connections
        keep reading the last committed state until COMMIT. Any exception
        raised inside the block rolls everything back and is re-raised.

        Yields:
            The connection to execute statements on
        """
        conn = await self.connect()
        async with self._lock:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                await conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    await conn.execute("ROLLBACK")
                raise

    @asynccontextmanager
    async def read(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Run several reads against one committed state.

        Waits for a running transaction to finish, so a reload in progress
        on the shared connection is never seen half-done. The lock is not
        reentrant: do not call fetchone/fetchall inside the block.
        """
        conn = await self.connect()
        async with self._lock:
            yield conn

    async def fetchone(self, query: str, params: tuple = ()):
        """Fetch one result."""
        async with self.read() as conn:
            async with conn.execute(query, params) as cursor:
                return await cursor.fetchone()

    async def fetchall(self, query: str, params: tuple = ()):
        """Fetch all results."""
        async with self.read() as conn:
            async with conn.execute(query, params) as cursor:
                return await cursor.fetchall()


async def init_database(db_path: str = "data/quiz_bank.db") -> Database:
    """Initialize database with schema from migrations/init.sql."""
    migrations_path = MIGRATIONS_DIR / "init.sql"

    if not migrations_path.exists():
        raise FileNotFoundError(f"Migration file not found: {migrations_path}")

    with open(migrations_path, "r", encoding="utf-8") as f:
        schema_sql = f.read()

    db = Database(db_path)
    conn = await db.connect()

    # Execute schema (split by ; and execute each statement)
    statements = schema_sql.split(";")
    for statement in statements:
        statement = statement.strip()
        if statement:
            await conn.execute(statement)

    logger.info("Database initialized at %s", db_path)

    return db


# Global database instance (will be initialized in bot.py)
db: Optional[Database] = None


def get_db() -> Database:
    """Get global database instance."""
    if db is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return db
