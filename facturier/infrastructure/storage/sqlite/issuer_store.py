"""SQLite implementation of the issuer profile (single ``settings`` row)."""

from facturier.config import get_logger
from facturier.core.entities.issuer import IssuerProfile
from facturier.core.interfaces.storage import IIssuerStore
from facturier.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    sqlite_errors,
)
from facturier.infrastructure.storage.sqlite.mappers import (
    ISSUER_COLUMNS,
    issuer_values,
    placeholders,
    row_to_issuer,
)

logger = get_logger(__name__)


class SQLiteIssuerStore(IIssuerStore):
    """Issuer profile stored as row ``id = 1`` of the settings table."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def get_profile(self) -> IssuerProfile | None:
        with sqlite_errors("get_profile"):
            async with self._pool.acquire() as conn:
                cursor = await conn.execute("SELECT * FROM settings WHERE id = 1")
                row = await cursor.fetchone()
        return row_to_issuer(row) if row else None

    async def save_profile(self, profile: IssuerProfile) -> IssuerProfile:
        columns = ("id", *ISSUER_COLUMNS)
        with sqlite_errors("save_profile"):
            async with self._pool.transaction() as conn:
                await conn.execute(
                    f"INSERT OR REPLACE INTO settings ({', '.join(columns)}) "
                    f"VALUES ({placeholders(columns)})",
                    (1, *issuer_values(profile)),
                )
        logger.info("issuer_profile_saved", siret=profile.siret)
        return profile
