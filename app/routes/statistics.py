from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers import statistics_controller
from app.core.ai_text_generator import GeminiTextGenerator
from app.core.database import get_db
from app.core.dependencies import (
    CurrentUser,
    get_aggregator,
    get_any_user,
    get_progress_calculator,
    get_statistics_repository,
    get_teacher_or_admin,
    get_text_generator,
)
from app.repositories.statistics_repository import StatisticsRepository
from app.schemas.statistics import (
    GameStatisticsResponse,
    ReportRequest,
    SaveStatisticsRequest,
    StatisticsOut,
    StudentProgressResponse,
    StudentReportResponse,
)
from app.services.progress_calculator import StudentProgressCalculator
from app.services.statistics_aggregator import StudentStatisticsAggregator

router = APIRouter(prefix="/statistics", tags=["Statistics"])


@router.post("", response_model=StatisticsOut, status_code=status.HTTP_201_CREATED)
async def save_statistics(
    payload: SaveStatisticsRequest,
    _: CurrentUser = Depends(get_any_user),
    db: AsyncSession = Depends(get_db),
    statistics_repository: StatisticsRepository = Depends(get_statistics_repository),
):
    return await statistics_controller.save_statistics(db, statistics_repository, payload)


@router.get("/student/{student_id}", response_model=StudentProgressResponse)
async def student_progress(
    student_id: str,
    _: CurrentUser = Depends(get_any_user),
    statistics_repository: StatisticsRepository = Depends(get_statistics_repository),
    calculator: StudentProgressCalculator = Depends(get_progress_calculator),
):
    return await statistics_controller.get_student_progress(statistics_repository, calculator, student_id)


@router.get("/student/{student_id}/game/{game_id}", response_model=StudentProgressResponse)
async def student_game_progress(
    student_id: str,
    game_id: str,
    _: CurrentUser = Depends(get_any_user),
    statistics_repository: StatisticsRepository = Depends(get_statistics_repository),
    calculator: StudentProgressCalculator = Depends(get_progress_calculator),
):
    return await statistics_controller.get_student_progress(
        statistics_repository, calculator, student_id, game_id
    )


@router.get("/game/{game_id}", response_model=GameStatisticsResponse)
async def game_statistics(
    game_id: str,
    _: CurrentUser = Depends(get_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
    statistics_repository: StatisticsRepository = Depends(get_statistics_repository),
):
    return await statistics_controller.get_game_statistics(db, statistics_repository, game_id)


@router.post("/student/{student_id}/report", response_model=StudentReportResponse)
async def student_report(
    student_id: str,
    payload: ReportRequest | None = None,
    _: CurrentUser = Depends(get_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
    statistics_repository: StatisticsRepository = Depends(get_statistics_repository),
    calculator: StudentProgressCalculator = Depends(get_progress_calculator),
    aggregator: StudentStatisticsAggregator = Depends(get_aggregator),
    text_generator: GeminiTextGenerator = Depends(get_text_generator),
):
    return await statistics_controller.generate_student_report(
        db,
        statistics_repository,
        calculator,
        aggregator,
        text_generator,
        student_id,
        payload.recent_days if payload else ReportRequest().recent_days,
    )
