from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class GameLevelOut(BaseModel):
    id: str
    game_id: str
    level: int
    name: str
    description: Optional[str]
    difficulty: Optional[str]
    activities_count: int
    config: dict[str, Any]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class GameLevelUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    difficulty: Optional[str] = Field(default=None, max_length=50)
    activities_count: Optional[int] = Field(default=None, ge=1)
    config: Optional[dict[str, Any]] = None
    is_active: Optional[bool] = None


class GameLevelsOut(BaseModel):
    game_id: str
    levels: list[GameLevelOut]


class GameWithLevelsOut(BaseModel):
    game_id: str
    total_levels: int
    active_levels: int
    levels: list[GameLevelOut]
