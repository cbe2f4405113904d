"""Store contracts consumed by the services and controllers.

The SQLAlchemy implementations live next to this module; tests pass in-memory
fakes that satisfy the same protocols.
"""

from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from app.models.game import GameLevel
from app.models.student_statistics import StudentStatistics


@dataclass(frozen=True)
class LastCompletedActivity:
    level: int
    activity: int


class LevelConfig(Protocol):
    level: int
    activities_count: int


class StatisticsStore(Protocol):
    async def get_last_completed_activity(
        self, student_id: str, game_id: str
    ) -> LastCompletedActivity | None: ...

    async def get_distinct_completed_activities(self, student_id: str, game_id: str) -> int: ...

    async def save(self, statistics: StudentStatistics) -> StudentStatistics: ...

    async def find_latest(self, student_id: str, game_id: str) -> StudentStatistics | None: ...

    async def find_by_student(self, student_id: str) -> list[StudentStatistics]: ...

    async def find_by_student_and_game(
        self, student_id: str, game_id: str
    ) -> list[StudentStatistics]: ...

    async def get_student_total_points(self, student_id: str) -> int: ...

    async def get_student_total_points_by_game(self, student_id: str, game_id: str) -> int: ...

    async def get_student_completion_rate(self, student_id: str, game_id: str) -> float: ...

    async def get_student_average_accuracy(self, student_id: str, game_id: str) -> float: ...

    async def get_all_students_progress(self, game_id: str) -> list[StudentStatistics]: ...

    async def get_game_statistics(self, game_id: str) -> dict[str, Any]: ...


class GameLevelStore(Protocol):
    async def find_by_game_id(self, game_id: str) -> Sequence[LevelConfig]: ...

    async def find_active_by_game_id(self, game_id: str) -> list[GameLevel]: ...

    async def find_by_game_id_and_level(self, game_id: str, level: int) -> GameLevel | None: ...

    async def find_by_id(self, level_id: str) -> GameLevel | None: ...

    async def find_all(self) -> list[GameLevel]: ...

    async def update(self, level: GameLevel, changes: dict[str, Any]) -> GameLevel: ...

    async def get_total_activities_count(self, game_id: str) -> int: ...
