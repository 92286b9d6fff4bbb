"""
SQLite storage for users and one-time login codes.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import aiosqlite

from quickcourt.db import Database, now_iso
from quickcourt.models import Role, UserInfo

logger = logging.getLogger(__name__)


def _row_to_user(row: aiosqlite.Row) -> UserInfo:
    return UserInfo(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        phone=row["phone"],
        role=row["role"],
        is_suspended=bool(row["is_suspended"]),
        suspension_reason=row["suspension_reason"],
        created_at=row["created_at"],
        last_login_at=row["last_login_at"],
    )


class SqliteUserRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def get(self, user_id: int) -> UserInfo | None:
        row = await self.db.fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
        return _row_to_user(row) if row else None

    async def get_by_email(self, email: str) -> UserInfo | None:
        row = await self.db.fetch_one("SELECT * FROM users WHERE email = ? COLLATE NOCASE", (email,))
        return _row_to_user(row) if row else None

    async def create(self, email: str, name: str, role: Role = Role.USER, phone: str | None = None) -> UserInfo:
        cur = await self.db.execute(
            "INSERT INTO users (email, name, phone, role, created_at) VALUES (?, ?, ?, ?, ?)",
            (email.lower(), name, phone, Role(role).value, now_iso()),
        )
        user = await self.get(cur.lastrowid)
        assert user is not None
        return user

    async def update_profile(self, user_id: int, fields: dict[str, Any]) -> UserInfo | None:
        updates = {k: v for k, v in fields.items() if k in ("name", "phone")}
        if updates:
            set_clause = ", ".join(f"{k} = ?" for k in updates)
            await self.db.execute(f"UPDATE users SET {set_clause} WHERE id = ?", [*updates.values(), user_id])
        return await self.get(user_id)

    async def set_role(self, user_id: int, role: Role) -> UserInfo | None:
        await self.db.execute("UPDATE users SET role = ? WHERE id = ?", (Role(role).value, user_id))
        return await self.get(user_id)

    async def set_suspended(self, user_id: int, is_suspended: bool, reason: str | None = None) -> UserInfo | None:
        await self.db.execute(
            "UPDATE users SET is_suspended = ?, suspension_reason = ? WHERE id = ?",
            (int(is_suspended), reason if is_suspended else None, user_id),
        )
        return await self.get(user_id)

    async def touch_login(self, user_id: int) -> None:
        await self.db.execute("UPDATE users SET last_login_at = ? WHERE id = ?", (now_iso(), user_id))

    async def list_users(
        self,
        role: Role | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[UserInfo], int]:
        clauses: list[str] = []
        params: list[Any] = []
        if role is not None:
            clauses.append("role = ?")
            params.append(Role(role).value)
        if search:
            clauses.append("(LOWER(name) LIKE ? OR LOWER(email) LIKE ?)")
            term = f"%{search.lower()}%"
            params.extend([term, term])
        where = " WHERE " + " AND ".join(clauses) if clauses else ""

        total = await self.db.fetch_value("SELECT COUNT(*) FROM users" + where, params)
        rows = await self.db.fetch_all(
            "SELECT * FROM users" + where + " ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
            [*params, limit, offset],
        )
        return [_row_to_user(r) for r in rows], total or 0

    async def count_by_role(self) -> dict[str, int]:
        rows = await self.db.fetch_all("SELECT role, COUNT(*) AS n FROM users GROUP BY role")
        return {r["role"]: r["n"] for r in rows}

    # ── OTP codes ─────────────────────────────────────────────────────

    async def create_otp(self, email: str, code: str, ttl_seconds: int) -> None:
        """Store a login code, invalidating any earlier unused codes for the email."""
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
        await self.db.execute("UPDATE otp_codes SET used = 1 WHERE email = ? AND used = 0", (email.lower(),))
        await self.db.execute(
            "INSERT INTO otp_codes (email, code, expires_at) VALUES (?, ?, ?)",
            (email.lower(), code, expires_at.isoformat()),
        )

    async def verify_otp(self, email: str, code: str) -> bool:
        """Consume a code. Returns False if it is wrong, used or expired."""
        row = await self.db.fetch_one(
            """
            SELECT id, expires_at FROM otp_codes
            WHERE email = ? AND code = ? AND used = 0
            ORDER BY id DESC LIMIT 1
            """,
            (email.lower(), code),
        )
        if row is None:
            return False
        if datetime.fromisoformat(row["expires_at"]) < datetime.now(timezone.utc):
            return False

        # Only one caller can flip used from 0 to 1
        cur = await self.db.execute("UPDATE otp_codes SET used = 1 WHERE id = ? AND used = 0", (row["id"],))
        return cur.rowcount == 1
