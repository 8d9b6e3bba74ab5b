from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite

from searchbuilder.constants import SQLITE_BUSY_TIMEOUT_MS
from searchbuilder.logging import get_logger

if TYPE_CHECKING:
    from searchbuilder.config import Config

_logger = get_logger(__name__)


class Database:
    """Single aiosqlite connection that search queries run on."""

    def __init__(self, db_path: Path | str, busy_timeout_ms: int = SQLITE_BUSY_TIMEOUT_MS, wal: bool = True):
        self.db_path = Path(db_path)
        self.busy_timeout_ms = busy_timeout_ms
        self.wal = wal
        self._conn: aiosqlite.Connection | None = None

    @classmethod
    def from_config(cls, config: "Config") -> "Database":
        return cls(config.db_path)

    async def connect(self) -> None:
        if self._conn is not None:
            return
        conn = await aiosqlite.connect(self.db_path)
        conn.row_factory = aiosqlite.Row
        if self.wal:
            await conn.execute("PRAGMA journal_mode=WAL;")
            await conn.execute("PRAGMA synchronous=NORMAL;")
        await conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout_ms)};")
        self._conn = conn
        _logger.debug("Connected", db_path=str(self.db_path), wal=self.wal)

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError(f"Database {self.db_path} not connected")
        return self._conn
