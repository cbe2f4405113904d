from fastapi import APIRouter, Depends, Query

from app.controllers import game_controller
from app.core.dependencies import CurrentUser, get_any_user, get_current_admin, get_level_repository
from app.repositories.game_level_repository import GameLevelRepository
from app.schemas.game import GameLevelOut, GameLevelsOut, GameLevelUpdate, GameWithLevelsOut

router = APIRouter(prefix="/games", tags=["Games"])


# NOTE: declared before /{game_id}/levels so "all-with-levels" is not read as a game id
@router.get("/all-with-levels", response_model=list[GameWithLevelsOut])
async def all_games_with_levels(
    _: CurrentUser = Depends(get_any_user),
    levels: GameLevelRepository = Depends(get_level_repository),
):
    return await game_controller.get_all_games_with_levels(levels)


@router.put("/levels/{level_id}", response_model=GameLevelOut)
async def update_level(
    level_id: str,
    payload: GameLevelUpdate,
    _: CurrentUser = Depends(get_current_admin),
    levels: GameLevelRepository = Depends(get_level_repository),
):
    return await game_controller.update_game_level(levels, level_id, payload)


@router.get("/{game_id}/levels", response_model=GameLevelsOut)
async def game_levels(
    game_id: str,
    only_active: bool = Query(False, description="Return only active levels"),
    _: CurrentUser = Depends(get_any_user),
    levels: GameLevelRepository = Depends(get_level_repository),
):
    return await game_controller.get_game_levels(levels, game_id, only_active)


@router.get("/{game_id}/levels/{level}", response_model=GameLevelOut)
async def game_level(
    game_id: str,
    level: int,
    _: CurrentUser = Depends(get_any_user),
    levels: GameLevelRepository = Depends(get_level_repository),
):
    return await game_controller.get_game_level(levels, game_id, level)
