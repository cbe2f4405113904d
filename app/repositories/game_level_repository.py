from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.game import GameLevel
from app.models.user import utcnow

# Columns a level update may touch
UPDATABLE_FIELDS = ("name", "description", "difficulty", "activities_count", "config", "is_active")


class GameLevelRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_game_id(self, game_id: str) -> list[GameLevel]:
        q = select(GameLevel).where(GameLevel.game_id == game_id).order_by(GameLevel.level.asc())
        return list((await self.db.execute(q)).scalars().all())

    async def find_active_by_game_id(self, game_id: str) -> list[GameLevel]:
        q = (
            select(GameLevel)
            .where(GameLevel.game_id == game_id, GameLevel.is_active.is_(True))
            .order_by(GameLevel.level.asc())
        )
        return list((await self.db.execute(q)).scalars().all())

    async def find_by_game_id_and_level(self, game_id: str, level: int) -> GameLevel | None:
        q = select(GameLevel).where(GameLevel.game_id == game_id, GameLevel.level == level)
        return (await self.db.execute(q)).scalar_one_or_none()

    async def find_by_id(self, level_id: str) -> GameLevel | None:
        return await self.db.get(GameLevel, level_id)

    async def find_all(self) -> list[GameLevel]:
        q = select(GameLevel).order_by(GameLevel.game_id, GameLevel.level.asc())
        return list((await self.db.execute(q)).scalars().all())

    async def update(self, level: GameLevel, changes: dict[str, Any]) -> GameLevel:
        """Apply the non-None entries of `changes`; unknown keys are ignored."""
        for field in UPDATABLE_FIELDS:
            value = changes.get(field)
            if value is not None:
                setattr(level, field, value)
        level.updated_at = utcnow()

        await self.db.flush()
        await self.db.refresh(level)
        return level

    async def get_total_activities_count(self, game_id: str) -> int:
        q = select(func.sum(GameLevel.activities_count)).where(GameLevel.game_id == game_id)
        return int((await self.db.execute(q)).scalar() or 0)
