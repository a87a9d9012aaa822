# manages the key-value store backing every store, mirrors a browser localStorage
import asyncio
import json
import os
import os.path
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import aiosqlite

from utils.logger import get_logger

_logger = get_logger(__name__)

DB_PATH = os.getenv("STOREFRONT_DB", "data/storefront.sqlite")

_KV_TABLE = """
CREATE TABLE IF NOT EXISTS kv (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_initialized: set[str] = set()
_init_lock = asyncio.Lock()

# failures that are absorbed instead of surfacing to callers
STORAGE_ERRORS = (aiosqlite.Error, OSError)


async def _init_db(conn: aiosqlite.Connection) -> None:
    await conn.executescript(_KV_TABLE)
    await conn.commit()


@asynccontextmanager
async def connect(path: Optional[str] = None) -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection to the kv database.

    Creates the parent directory and the kv table on first use of a path.
    """
    path = path or DB_PATH
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    conn = await aiosqlite.connect(path)

    try:
        if path not in _initialized:
            async with _init_lock:
                if path not in _initialized:
                    _logger.info(f"Initializing key-value store at {path}...")
                    await _init_db(conn)
                    _initialized.add(path)
        yield conn
    finally:
        await conn.close()


class LocalStorage:
    """
    Key-value persistence with JSON values, one row per key.

    Reads never fail: missing keys, unparsable payloads and I/O errors all
    come back as the default. Writes are best-effort and report whether
    they landed.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or DB_PATH
        # held by stores around read-modify-write sequences
        self.lock = asyncio.Lock()

    # ---------------------------
    # Raw access
    # ---------------------------

    async def get_item(self, key: str) -> Optional[str]:
        """Return the raw stored string or None. Raises on I/O failure."""
        async with connect(self.path) as conn:
            cur = await conn.execute("SELECT value FROM kv WHERE key = ?;", (key,))
            row = await cur.fetchone()
            await cur.close()
        return row[0] if row else None

    async def set_item(self, key: str, raw: str) -> None:
        async with connect(self.path) as conn:
            await conn.execute(
                "INSERT INTO kv(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value;",
                (key, raw),
            )
            await conn.commit()

    # ---------------------------
    # JSON access
    # ---------------------------

    async def read(self, key: str, default: Any = None) -> Any:
        try:
            raw = await self.get_item(key)
        except STORAGE_ERRORS as e:
            _logger.warning(f"Read of '{key}' failed, treating as empty: {e}")
            return default
        if raw is None:
            return default

        try:
            value = json.loads(raw)
        except ValueError:
            _logger.warning(f"Stored payload for '{key}' is corrupt, ignoring it.")
            return default

        if default is not None and not isinstance(value, type(default)):
            _logger.warning(
                f"Stored payload for '{key}' is a {type(value).__name__}, "
                f"expected {type(default).__name__}; ignoring it."
            )
            return default
        return value

    async def write(self, key: str, value: Any) -> bool:
        try:
            await self.set_item(key, json.dumps(value))
        except STORAGE_ERRORS as e:
            _logger.warning(f"Write of '{key}' failed: {e}")
            return False
        return True

    async def write_many(self, values: Dict[str, Any]) -> bool:
        """Write several keys in a single transaction; all land or none do."""
        rows = [(key, json.dumps(value)) for key, value in values.items()]
        try:
            async with connect(self.path) as conn:
                await conn.executemany(
                    "INSERT INTO kv(key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value;",
                    rows,
                )
                await conn.commit()
        except STORAGE_ERRORS as e:
            _logger.warning(f"Write of {list(values)} failed, nothing saved: {e}")
            return False
        return True

    async def remove(self, key: str) -> bool:
        try:
            async with connect(self.path) as conn:
                await conn.execute("DELETE FROM kv WHERE key = ?;", (key,))
                await conn.commit()
        except STORAGE_ERRORS as e:
            _logger.warning(f"Removal of '{key}' failed: {e}")
            return False
        return True
