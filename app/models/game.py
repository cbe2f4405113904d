# app/models/game.py

from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, Text, ForeignKey, Index, UniqueConstraint, func
)
from sqlalchemy.orm import relationship

from app.core.database import Base, JSONType
from app.models.user import new_id


class Game(Base):
    __tablename__ = "games"

    # ids are readable slugs: "game-ordenamiento", "game-calculos", ...
    id = Column(String(255), primary_key=True)

    name = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    route = Column(String(255), nullable=False)
    difficulty_level = Column(Integer, nullable=False, default=1)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    levels = relationship("GameLevel", back_populates="game", order_by="GameLevel.level")


class GameLevel(Base):
    """
    Static configuration of one level of a game.

    `config` holds whatever the game front-end needs for that level:
    numeric ranges (min/max), the operation ("suma", 10, ...), colours, icons.
    """
    __tablename__ = "games_levels"

    id = Column(String(255), primary_key=True, default=new_id)
    game_id = Column(String(255), ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True)

    level = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    difficulty = Column(String(50), nullable=True)

    activities_count = Column(Integer, nullable=False, default=5)
    config = Column(JSONType, nullable=False, default=dict)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    game = relationship("Game", back_populates="levels")

    __table_args__ = (
        UniqueConstraint("game_id", "level", name="uq_games_levels_game_level"),
        Index("ix_games_levels_game_active", "game_id", "is_active"),
    )

    def config_value(self, key: str, default=None):
        value = (self.config or {}).get(key)
        return default if value is None else value

    def has_config_key(self, key: str) -> bool:
        return (self.config or {}).get(key) is not None

    def numeric_range(self) -> dict | None:
        if self.has_config_key("min") and self.has_config_key("max"):
            return {"min": self.config["min"], "max": self.config["max"]}
        return None

    def is_valid_configuration(self) -> bool:
        return (
            (self.level or 0) > 0
            and (self.activities_count or 0) > 0
            and isinstance(self.config, dict)
        )
