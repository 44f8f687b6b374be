# durable client-side storage for the admin session, backed by sqlite
import asyncio
import os.path
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from sqlite3 import Row
from typing import Callable, Optional

import aiosqlite

from utils.logger import get_logger

_logger = get_logger(__name__)

TOKEN_KEY = "adminToken"
COOKIE_NAME = "adminToken"
COOKIE_PATH = "/"
COOKIE_MAX_AGE = 60 * 60 * 24 * 7  # 7 days
COOKIE_SAME_SITE = "Lax"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS local_storage (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS cookies (
    name       TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    path       TEXT NOT NULL,
    max_age    INTEGER NOT NULL,
    same_site  TEXT NOT NULL,
    secure     INTEGER NOT NULL,
    expires_at REAL NOT NULL
);
"""


@dataclass(frozen=True)
class CookieMirror:
    """Copy of the session token kept as a cookie for the server-side gate."""

    value: str
    path: str
    max_age: int
    same_site: str
    secure: bool
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def header(self) -> str:
        return f"{COOKIE_NAME}={self.value}"

    def set_cookie(self) -> str:
        """Set-Cookie rendering, mostly for logs and the settings screen."""
        parts = [
            f"{COOKIE_NAME}={self.value}",
            f"Path={self.path}",
            f"Max-Age={self.max_age}",
            f"SameSite={self.same_site}",
        ]
        if self.secure:
            parts.append("Secure")
        return "; ".join(parts)


class SessionStorage:
    """
    Token store shared by every request.

    `token` is the in-memory copy every request reads at send time; the
    sqlite file keeps it across restarts. The token and its cookie mirror are
    only ever written together (persist_session) and removed together
    (clear_session).
    """

    def __init__(self, path: str, clock: Callable[[], float] = time.time) -> None:
        self.path = path
        self.token: Optional[str] = None
        self.cookie: Optional[CookieMirror] = None
        self._clock = clock
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def _init_db(self, conn: aiosqlite.Connection) -> None:
        _logger.info(f"Initializing session storage at {self.path}...")
        await conn.executescript(_SCHEMA)
        await conn.commit()

    @asynccontextmanager
    async def connect(self):
        """Async context manager yielding an aiosqlite connection.

        Creates the parent directory and the tables on first use.
        """
        if not self._initialized:
            async with self._init_lock:
                if not self._initialized:
                    parent = os.path.dirname(self.path)
                    if parent:
                        os.makedirs(parent, exist_ok=True)
                    async with aiosqlite.connect(self.path) as init_conn:
                        await self._init_db(init_conn)
                    self._initialized = True
        conn = await aiosqlite.connect(self.path)
        conn.row_factory = Row
        try:
            yield conn
        finally:
            await conn.close()

    async def load(self) -> Optional[str]:
        """Read the persisted token (and its cookie mirror) into memory."""
        async with self.connect() as conn:
            cur = await conn.execute(
                "SELECT value FROM local_storage WHERE key = ?;", (TOKEN_KEY,)
            )
            row = await cur.fetchone()
            await cur.close()
            self.token = row["value"] if row else None

            cur = await conn.execute(
                """
                SELECT value, path, max_age, same_site, secure, expires_at
                FROM cookies
                WHERE name = ?;
                """,
                (COOKIE_NAME,),
            )
            row = await cur.fetchone()
            await cur.close()

            self.cookie = None
            if row:
                cookie = CookieMirror(
                    value=row["value"],
                    path=row["path"],
                    max_age=row["max_age"],
                    same_site=row["same_site"],
                    secure=bool(row["secure"]),
                    expires_at=row["expires_at"],
                )
                if cookie.is_expired(self._clock()):
                    _logger.debug("Dropping expired session cookie.")
                    await conn.execute(
                        "DELETE FROM cookies WHERE name = ?;", (COOKIE_NAME,)
                    )
                    await conn.commit()
                else:
                    self.cookie = cookie
        return self.token

    async def persist_session(self, token: str, secure: bool = False) -> None:
        """Write the token to local storage and to the cookie mirror."""
        cookie = CookieMirror(
            value=token,
            path=COOKIE_PATH,
            max_age=COOKIE_MAX_AGE,
            same_site=COOKIE_SAME_SITE,
            secure=secure,
            expires_at=self._clock() + COOKIE_MAX_AGE,
        )
        async with self.connect() as conn:
            await conn.execute(
                "INSERT OR REPLACE INTO local_storage(key, value) VALUES (?, ?);",
                (TOKEN_KEY, token),
            )
            await conn.execute(
                """
                INSERT OR REPLACE INTO cookies(
                    name, value, path, max_age, same_site, secure, expires_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    COOKIE_NAME,
                    cookie.value,
                    cookie.path,
                    cookie.max_age,
                    cookie.same_site,
                    int(cookie.secure),
                    cookie.expires_at,
                ),
            )
            await conn.commit()
        self.token = token
        self.cookie = cookie
        _logger.debug(
            f"Session persisted (cookie Max-Age={cookie.max_age}, Secure={secure})."
        )

    def forget(self) -> None:
        """Drop the in-memory token right away, before any await."""
        self.token = None
        self.cookie = None

    async def clear_session(self) -> None:
        """Remove the token from local storage and expire the cookie mirror."""
        self.forget()
        async with self.connect() as conn:
            await conn.execute(
                "DELETE FROM local_storage WHERE key = ?;", (TOKEN_KEY,)
            )
            await conn.execute("DELETE FROM cookies WHERE name = ?;", (COOKIE_NAME,))
            await conn.commit()
        _logger.debug("Session storage cleared.")

    def cookie_header(self) -> Optional[str]:
        if self.cookie is None or self.cookie.is_expired(self._clock()):
            return None
        return self.cookie.header()

    def gate_token(self) -> Optional[str]:
        """Token as a server-side gate would see it: cookie first, then header."""
        if self.cookie is not None and not self.cookie.is_expired(self._clock()):
            return self.cookie.value
        return self.token
