"""
backend/app/evaluation/routes.py

Evaluation Routes
- Submit a completed evaluation and get its score
- Evaluation history, statistics, detail and quality breakdown
- Update property information or delete an evaluation
- Public level thresholds
"""

from fastapi import APIRouter, Depends, Request, status

from app.core.dependencies import CurrentUserDep, DBDep, PaginationParams
from app.core.i18n import LanguageDep
from app.core.limiter import limiter
from app.core.schemas import MessageResponse, PaginatedResponse
from app.core.security import get_client_ip
from app.evaluation import schemas
from app.evaluation.scoring import level_thresholds
from app.evaluation.services import EvaluationService

router = APIRouter(prefix="/evaluations", tags=["Evaluations"])


@router.post(
    "",
    response_model=schemas.EvaluationCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Evaluation",
    description=(
        "Scores the chosen answers of a property type and stores the evaluation. "
        "Weights are taken from the catalog."
    ),
)
@limiter.limit("20/minute")
async def submit_evaluation(
    request: Request,
    payload: schemas.EvaluationCreate,
    db: DBDep,
    current_user: CurrentUserDep,
    lang: LanguageDep,
) -> schemas.EvaluationCreated:
    return await EvaluationService(db).create(
        current_user, payload, get_client_ip(request), lang
    )


@router.get(
    "",
    response_model=PaginatedResponse[schemas.EvaluationSummary],
    status_code=status.HTTP_200_OK,
    summary="List My Evaluations",
    description="Evaluation history of the current user, newest first.",
)
async def list_evaluations(
    db: DBDep,
    current_user: CurrentUserDep,
    lang: LanguageDep,
    pagination: PaginationParams = Depends(),
) -> PaginatedResponse[schemas.EvaluationSummary]:
    return await EvaluationService(db).list_sessions(
        current_user, pagination.skip, pagination.limit, lang
    )


@router.get(
    "/stats",
    response_model=schemas.EvaluationStats,
    status_code=status.HTTP_200_OK,
    summary="Evaluation Statistics",
)
async def evaluation_stats(db: DBDep, current_user: CurrentUserDep) -> schemas.EvaluationStats:
    return await EvaluationService(db).get_stats(current_user)


@router.get(
    "/levels",
    response_model=schemas.LevelThresholds,
    status_code=status.HTTP_200_OK,
    summary="Level Thresholds",
    description="Percentage bands of the evaluation levels.",
)
async def get_level_thresholds() -> schemas.LevelThresholds:
    return level_thresholds()


@router.get(
    "/{evaluation_id}",
    response_model=schemas.EvaluationDetail,
    status_code=status.HTTP_200_OK,
    summary="Get Evaluation",
    description="Stored evaluation with its answers and per-category scores.",
)
async def get_evaluation(
    evaluation_id: int, db: DBDep, current_user: CurrentUserDep, lang: LanguageDep
) -> schemas.EvaluationDetail:
    return await EvaluationService(db).get_detail(current_user, evaluation_id, lang)


@router.get(
    "/{evaluation_id}/quality",
    response_model=schemas.QualityScoreBreakdown,
    status_code=status.HTTP_200_OK,
    summary="Quality Score",
    description="0-100 quality score per category and overall, with a 1-5 star rating.",
)
async def get_quality_score(
    evaluation_id: int, db: DBDep, current_user: CurrentUserDep, lang: LanguageDep
) -> schemas.QualityScoreBreakdown:
    return await EvaluationService(db).get_quality(current_user, evaluation_id, lang)


@router.patch(
    "/{evaluation_id}",
    response_model=schemas.EvaluationSummary,
    status_code=status.HTTP_200_OK,
    summary="Update Property Information",
)
@limiter.limit("20/minute")
async def update_evaluation(
    request: Request,
    evaluation_id: int,
    payload: schemas.EvaluationUpdate,
    db: DBDep,
    current_user: CurrentUserDep,
    lang: LanguageDep,
) -> schemas.EvaluationSummary:
    return await EvaluationService(db).update(current_user, evaluation_id, payload, lang)


@router.delete(
    "/{evaluation_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete Evaluation",
)
@limiter.limit("20/minute")
async def delete_evaluation(
    request: Request,
    evaluation_id: int,
    db: DBDep,
    current_user: CurrentUserDep,
) -> MessageResponse:
    await EvaluationService(db).delete(current_user, evaluation_id)
    return MessageResponse(message="Evaluation deleted successfully")
