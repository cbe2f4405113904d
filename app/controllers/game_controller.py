from collections import defaultdict
from typing import List

import structlog

from app.core.exceptions import InvalidRequestError, NotFoundError
from app.repositories.contracts import GameLevelStore
from app.schemas.game import (
    GameLevelOut,
    GameLevelsOut,
    GameLevelUpdate,
    GameWithLevelsOut,
)

logger = structlog.get_logger(__name__)


async def get_game_levels(
    levels: GameLevelStore, game_id: str, only_active: bool = False
) -> GameLevelsOut:
    rows = (
        await levels.find_active_by_game_id(game_id)
        if only_active
        else await levels.find_by_game_id(game_id)
    )
    return GameLevelsOut(game_id=game_id, levels=[GameLevelOut.model_validate(r) for r in rows])


async def get_game_level(levels: GameLevelStore, game_id: str, level: int) -> GameLevelOut:
    row = await levels.find_by_game_id_and_level(game_id, level)
    if not row:
        raise NotFoundError(f"Level {level} not found for game {game_id}")
    return GameLevelOut.model_validate(row)


async def get_all_games_with_levels(levels: GameLevelStore) -> List[GameWithLevelsOut]:
    grouped: dict[str, list] = defaultdict(list)
    for row in await levels.find_all():
        grouped[row.game_id].append(row)

    out = []
    for game_id, rows in grouped.items():
        rows.sort(key=lambda r: r.level)
        out.append(
            GameWithLevelsOut(
                game_id=game_id,
                total_levels=len(rows),
                active_levels=sum(1 for r in rows if r.is_active),
                levels=[GameLevelOut.model_validate(r) for r in rows],
            )
        )
    return out


async def update_game_level(
    levels: GameLevelStore, level_id: str, payload: GameLevelUpdate
) -> GameLevelOut:
    row = await levels.find_by_id(level_id)
    if not row:
        raise NotFoundError("Level not found")

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise InvalidRequestError("No fields to update")

    row = await levels.update(row, changes)
    logger.info("game_level.updated", level_id=level_id, fields=sorted(changes))
    return GameLevelOut.model_validate(row)
