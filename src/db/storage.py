# persisted string values under fixed, well-known keys
from typing import Optional

from db.database import connect

TOKEN_KEY = "token"
CART_KEY = "yarn_cart"


async def get(key: str) -> Optional[str]:
    """Return the stored value for key, or None when absent."""
    async with connect() as conn:
        cur = await conn.execute("SELECT value FROM kv WHERE key = ?;", (key,))
        row = await cur.fetchone()
        await cur.close()
    return row[0] if row else None


async def put(key: str, value: str) -> None:
    """Insert or overwrite the value for key. Last writer wins."""
    async with connect() as conn:
        await conn.execute(
            """
            INSERT INTO kv(key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                           updated_at = excluded.updated_at;
            """,
            (key, value),
        )
        await conn.commit()


async def delete(key: str) -> None:
    async with connect() as conn:
        await conn.execute("DELETE FROM kv WHERE key = ?;", (key,))
        await conn.commit()
