"""
backend/app/question/routes.py

Question & Answer Routes
Catalog admins (OWNER / ADMIN / SUPERUSER):
- Question CRUD with nested answers (PUT reconciles the full answer list)
- Answer CRUD
- Import template / export download

Importers (ADMIN / SUPERUSER):
- Bulk import from JSON rows or an uploaded CSV / Excel file
"""

from typing import Literal

from fastapi import APIRouter, File, Form, Query, Request, Response, UploadFile, status

from app.core.dependencies import CatalogAdminDep, DBDep, ImporterDep
from app.core.limiter import limiter
from app.core.schemas import MessageResponse
from app.question import schemas
from app.question.bulk import BulkImportService, parse_csv_rows, parse_xlsx_rows
from app.question.services import AnswerService, QuestionService
from app.question.templates import TemplateService

router = APIRouter(prefix="/admin/questions", tags=["Admin: Questions"])
answers_router = APIRouter(prefix="/admin/answers", tags=["Admin: Answers"])


# ---------------------------------------------------
# Questions
# ---------------------------------------------------
@router.get(
    "",
    response_model=list[schemas.QuestionRead],
    status_code=status.HTTP_200_OK,
    summary="List Questions",
    description="Questions with their answers, optionally filtered by category.",
)
async def list_questions(
    db: DBDep,
    current_user: CatalogAdminDep,
    category_id: int | None = Query(None, gt=0, description="Only this category"),
) -> list[schemas.QuestionRead]:
    questions = await QuestionService(db).list_questions(category_id)
    return [schemas.QuestionRead.model_validate(q) for q in questions]


@router.post(
    "",
    response_model=schemas.QuestionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Question",
    description="Creates a question with at least two answers. 404 if the category does not exist.",
)
@limiter.limit("30/minute")
async def create_question(
    request: Request,
    payload: schemas.QuestionCreate,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.QuestionRead:
    question = await QuestionService(db).create(payload)
    return schemas.QuestionRead.model_validate(question)


@router.get(
    "/template",
    status_code=status.HTTP_200_OK,
    summary="Download Import Template",
    description=(
        "CSV or Excel template (header, instruction row, existing or sample rows), "
        "CSV or Excel export of a property type, or Markdown instructions."
    ),
    response_class=Response,
)
async def download_template(
    db: DBDep,
    current_user: CatalogAdminDep,
    property_type_id: int | None = Query(None, gt=0),
    format: Literal["csv", "xlsx", "markdown"] = Query("csv"),
    type: Literal["template", "export"] = Query("template"),
) -> Response:
    template = await TemplateService(db).build(property_type_id, format, type)
    return Response(
        content=template.content,
        media_type=template.media_type,
        headers={"Content-Disposition": f'attachment; filename="{template.filename}"'},
    )


@router.post(
    "/bulk-import",
    response_model=schemas.BulkImportResult,
    status_code=status.HTTP_200_OK,
    summary="Bulk Import Questions",
    description="Upserts categories, questions and answers of a property type from flat rows.",
)
@limiter.limit("5/minute")
async def bulk_import(
    request: Request,
    payload: schemas.BulkImportRequest,
    db: DBDep,
    current_user: ImporterDep,
) -> schemas.BulkImportResult:
    return await BulkImportService(db).run(payload)


@router.post(
    "/bulk-import/csv",
    response_model=schemas.BulkImportResult,
    status_code=status.HTTP_200_OK,
    summary="Bulk Import Questions (CSV)",
    description="Same as the JSON import, from a CSV file in the template layout.",
)
@limiter.limit("5/minute")
async def bulk_import_csv(
    request: Request,
    db: DBDep,
    current_user: ImporterDep,
    property_type_id: int = Form(..., gt=0),
    mode: Literal["append", "replace"] = Form("append"),
    file: UploadFile = File(...),
) -> schemas.BulkImportResult:
    rows = parse_csv_rows(await file.read())
    payload = schemas.BulkImportRequest(property_type_id=property_type_id, mode=mode, rows=rows)
    return await BulkImportService(db).run(payload)


@router.post(
    "/bulk-import/xlsx",
    response_model=schemas.BulkImportResult,
    status_code=status.HTTP_200_OK,
    summary="Bulk Import Questions (Excel)",
    description="Same as the JSON import, from an .xlsx workbook in the template layout.",
)
@limiter.limit("5/minute")
async def bulk_import_xlsx(
    request: Request,
    db: DBDep,
    current_user: ImporterDep,
    property_type_id: int = Form(..., gt=0),
    mode: Literal["append", "replace"] = Form("append"),
    file: UploadFile = File(...),
) -> schemas.BulkImportResult:
    rows = parse_xlsx_rows(await file.read())
    payload = schemas.BulkImportRequest(property_type_id=property_type_id, mode=mode, rows=rows)
    return await BulkImportService(db).run(payload)


@router.get(
    "/{question_id}",
    response_model=schemas.QuestionRead,
    status_code=status.HTTP_200_OK,
    summary="Get Question",
)
async def get_question(
    question_id: int, db: DBDep, current_user: CatalogAdminDep
) -> schemas.QuestionRead:
    question = await QuestionService(db).get_question_or_404(question_id)
    return schemas.QuestionRead.model_validate(question)


@router.put(
    "/{question_id}",
    response_model=schemas.QuestionRead,
    status_code=status.HTTP_200_OK,
    summary="Replace Question",
    description=(
        "Updates the question and reconciles its answers in one transaction. "
        "400 for answers of another question; 409 if fewer than two answers would remain."
    ),
)
@limiter.limit("30/minute")
async def replace_question(
    request: Request,
    question_id: int,
    payload: schemas.QuestionFullUpdate,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.QuestionRead:
    question = await QuestionService(db).full_update(question_id, payload)
    return schemas.QuestionRead.model_validate(question)


@router.patch(
    "/{question_id}",
    response_model=schemas.QuestionRead,
    status_code=status.HTTP_200_OK,
    summary="Update Question",
    description="Partial update of texts, weight or category.",
)
@limiter.limit("30/minute")
async def update_question(
    request: Request,
    question_id: int,
    payload: schemas.QuestionPatch,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.QuestionRead:
    question = await QuestionService(db).patch(question_id, payload)
    return schemas.QuestionRead.model_validate(question)


@router.delete(
    "/{question_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete Question",
    description="Deletes the question, its answers and the user answers referencing them.",
)
@limiter.limit("30/minute")
async def delete_question(
    request: Request,
    question_id: int,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> MessageResponse:
    await QuestionService(db).delete(question_id)
    return MessageResponse(message="Question deleted successfully")


# ---------------------------------------------------
# Answers
# ---------------------------------------------------
@answers_router.get(
    "",
    response_model=list[schemas.AnswerRead],
    status_code=status.HTTP_200_OK,
    summary="List Answers",
)
async def list_answers(
    db: DBDep,
    current_user: CatalogAdminDep,
    question_id: int | None = Query(None, gt=0, description="Only this question"),
) -> list[schemas.AnswerRead]:
    answers = await AnswerService(db).list_answers(question_id)
    return [schemas.AnswerRead.model_validate(a) for a in answers]


@answers_router.post(
    "",
    response_model=schemas.AnswerRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Answer",
)
@limiter.limit("30/minute")
async def create_answer(
    request: Request,
    payload: schemas.AnswerCreate,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.AnswerRead:
    answer = await AnswerService(db).create(payload)
    return schemas.AnswerRead.model_validate(answer)


@answers_router.patch(
    "/{answer_id}",
    response_model=schemas.AnswerRead,
    status_code=status.HTTP_200_OK,
    summary="Update Answer",
)
@limiter.limit("30/minute")
async def update_answer(
    request: Request,
    answer_id: int,
    payload: schemas.AnswerUpdate,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> schemas.AnswerRead:
    answer = await AnswerService(db).update(answer_id, payload)
    return schemas.AnswerRead.model_validate(answer)


@answers_router.delete(
    "/{answer_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete Answer",
    description="409 when the question would be left with fewer than two answers.",
)
@limiter.limit("30/minute")
async def delete_answer(
    request: Request,
    answer_id: int,
    db: DBDep,
    current_user: CatalogAdminDep,
) -> MessageResponse:
    await AnswerService(db).delete(answer_id)
    return MessageResponse(message="Answer deleted successfully")
