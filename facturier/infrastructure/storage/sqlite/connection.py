"""
Async SQLite connection pool with aiosqlite.

Provides connection management with proper async context handling. The pool
is constructed explicitly and handed to the stores; there is no module-level
instance.
"""

import asyncio
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from contextvars import ContextVar
from pathlib import Path

import aiosqlite

from facturier.config import get_logger
from facturier.core.exceptions import DatabaseError

logger = get_logger(__name__)


class ConnectionPool:
    """
    Async SQLite connection pool.

    Manages a pool of connections with configurable size. While a
    ``transaction()`` is open, every ``acquire()`` or nested ``transaction()``
    in the same task reuses its connection, so several store calls commit or
    roll back together.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 2,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()
        self._current: ContextVar[aiosqlite.Connection | None] = ContextVar(
            f"sqlite_tx_{id(self)}", default=None
        )

    @property
    def in_transaction(self) -> bool:
        return self._current.get() is not None

    async def initialize(self) -> None:
        """Initialize the connection pool."""
        async with self._lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            for _ in range(self.pool_size):
                conn = await self._create_connection()
                self._connections.append(conn)
                await self._pool.put(conn)

            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _create_connection(self) -> aiosqlite.Connection:
        """Create a new database connection with optimized settings."""
        conn = await aiosqlite.connect(self.db_path)

        # Enable WAL mode for better concurrency
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")

        # Line tables cascade on their parent
        await conn.execute("PRAGMA foreign_keys=ON")

        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Acquire a connection from the pool.

        Usage:
            async with pool.acquire() as conn:
                await conn.execute(...)
        """
        current = self._current.get()
        if current is not None:
            yield current
            return

        if not self._initialized:
            await self.initialize()

        conn = await self._pool.get()
        try:
            yield conn
        finally:
            await self._pool.put(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Acquire a connection with transaction context.

        Commits on success and rolls back on exception. A nested call joins
        the outer transaction and leaves commit/rollback to it.
        """
        current = self._current.get()
        if current is not None:
            yield current
            return

        async with self.acquire() as conn:
            token = self._current.set(conn)
            try:
                yield conn
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise
            finally:
                self._current.reset(token)

    async def close(self) -> None:
        """Close all connections in the pool."""
        if self.in_transaction:
            raise DatabaseError("close", "connection pool closed inside an open transaction")
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            self._pool = asyncio.Queue(maxsize=self.pool_size)
            self._initialized = False
            logger.info("connection_pool_closed")


@contextmanager
def sqlite_errors(operation: str) -> Iterator[None]:
    """Re-raise driver errors as ``DatabaseError`` for the given operation."""
    try:
        yield
    except aiosqlite.Error as e:
        logger.error("database_operation_failed", operation=operation, error=str(e))
        raise DatabaseError(operation, str(e)) from e
