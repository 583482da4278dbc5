"""ProfileStore SQLite 实现"""

import aiosqlite

from ..exceptions import StoreUnavailableError
from ..models.profile import Profile


class SqliteProfileStore:
    """ProfileStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def get_profile(self, assignee_id: str) -> Profile | None:
        try:
            cursor = await self._conn.execute(
                "SELECT document FROM profiles WHERE assignee_id = ?",
                (assignee_id,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreUnavailableError("get_profile", e) from e
        if row is None:
            return None
        return Profile.model_validate_json(row[0])

    async def put_profile(self, profile: Profile) -> None:
        try:
            await self._conn.execute(
                """
                INSERT INTO profiles (assignee_id, version, updated_at, document)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(assignee_id) DO UPDATE SET
                    version = excluded.version,
                    updated_at = excluded.updated_at,
                    document = excluded.document
                """,
                (
                    profile.assignee_id,
                    profile.version,
                    profile.updated_at.isoformat() if profile.updated_at else None,
                    profile.model_dump_json(),
                ),
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._conn.rollback()
            raise StoreUnavailableError("put_profile", e) from e

    async def list_profiles(self) -> list[Profile]:
        try:
            cursor = await self._conn.execute(
                "SELECT document FROM profiles ORDER BY assignee_id"
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreUnavailableError("list_profiles", e) from e
        return [Profile.model_validate_json(row[0]) for row in rows]
