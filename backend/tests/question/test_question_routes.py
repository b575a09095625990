"""
tests/question/test_question_routes.py

Route tests for /admin/questions and /admin/answers.
"""

from io import BytesIO
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException, status
from httpx import AsyncClient
from openpyxl import Workbook

from app.database.models import User
from app.question.bulk import CSV_HEADERS
from app.question.schemas import AnswerRead, BulkImportResult, QuestionRead
from app.question.templates import XLSX_MEDIA_TYPE, TemplateFile

QUESTION_PAYLOAD = {
    "text_ro": "Este terenul racordat la apă, canal, curent și gaz?",
    "text_en": "Is the land connected to water, sewage, electricity and gas?",
    "weight": 10,
    "category_id": 1,
    "answers": [
        {"text_ro": "Da", "text_en": "Yes", "weight": 10},
        {"text_ro": "Nu", "text_en": "No", "weight": 0},
    ],
}

IMPORT_ROW = {
    "category_name_ro": "Utilități",
    "question_ro": "Este terenul racordat?",
    "question_weight": 10,
    "answer_ro": "Da",
    "answer_weight": 10,
}


# =====================
# --- Questions ---
# =====================
@pytest.mark.asyncio
@patch("app.question.routes.QuestionService.create", new_callable=AsyncMock)
async def test_create_question(
    mock_create: AsyncMock,
    fake_question_read: QuestionRead,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_owner_user: User,
) -> None:
    mock_create.return_value = fake_question_read
    response = await async_client.post("/admin/questions", json=QUESTION_PAYLOAD)
    assert response.status_code == status.HTTP_201_CREATED
    assert len(response.json()["answers"]) == 2
    assert mock_create.call_args.args[0].weight == 10


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "changes",
    [
        {"weight": 0},
        {"weight": 101},
        {"answers": [{"text_ro": "Da", "weight": 10}]},
        {"answers": [{"text_ro": "Da", "weight": 10}, {"text_ro": "Nu", "weight": -1}]},
        {"text_ro": "   "},
    ],
)
@patch("app.question.routes.QuestionService.create", new_callable=AsyncMock)
async def test_create_question_invalid_payload(
    mock_create: AsyncMock,
    changes: dict,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    response = await async_client.post("/admin/questions", json={**QUESTION_PAYLOAD, **changes})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Invalid input"
    mock_create.assert_not_awaited()


@pytest.mark.asyncio
async def test_questions_forbidden_for_member(
    async_client: AsyncClient, override_get_db: None, mock_current_member_user: User
) -> None:
    response = await async_client.get("/admin/questions")
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
@patch("app.question.routes.QuestionService.list_questions", new_callable=AsyncMock)
async def test_list_questions_by_category(
    mock_list: AsyncMock,
    fake_question_read: QuestionRead,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_list.return_value = [fake_question_read]
    response = await async_client.get("/admin/questions", params={"category_id": 1})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()[0]["id"] == 1
    mock_list.assert_awaited_once_with(1)


@pytest.mark.asyncio
@patch("app.question.routes.QuestionService.get_question_or_404", new_callable=AsyncMock)
async def test_get_question_not_found(
    mock_get: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_get.side_effect = HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Question not found"
    )
    response = await async_client.get("/admin/questions/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Question not found"


@pytest.mark.asyncio
@patch("app.question.routes.QuestionService.full_update", new_callable=AsyncMock)
async def test_replace_question_rejects_update_and_delete_of_same_answer(
    mock_update: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    payload = {
        "text_ro": "Întrebare",
        "weight": 5,
        "answers": [
            {"id": 1, "text_ro": "Da", "weight": 10},
            {"text_ro": "Nu", "weight": 0, "is_new": True},
        ],
        "deleted_answer_ids": [1],
    }
    response = await async_client.put("/admin/questions/1", json=payload)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    mock_update.assert_not_awaited()


@pytest.mark.asyncio
@patch("app.question.routes.QuestionService.full_update", new_callable=AsyncMock)
async def test_replace_question(
    mock_update: AsyncMock,
    fake_question_read: QuestionRead,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_update.return_value = fake_question_read
    payload = {
        "text_ro": "Întrebare",
        "weight": 5,
        "answers": [
            {"id": 1, "text_ro": "Da", "weight": 10},
            {"text_ro": "Parțial", "weight": 5, "is_new": True},
        ],
        "deleted_answer_ids": [2],
    }
    response = await async_client.put("/admin/questions/1", json=payload)
    assert response.status_code == status.HTTP_200_OK
    question_id, sent = mock_update.call_args.args
    assert question_id == 1
    assert sent.deleted_answer_ids == [2]
    assert [a.is_existing for a in sent.answers] == [True, False]


@pytest.mark.asyncio
@patch("app.question.routes.QuestionService.delete", new_callable=AsyncMock)
async def test_delete_question(
    mock_delete: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    response = await async_client.delete("/admin/questions/3")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Question deleted successfully"
    mock_delete.assert_awaited_once_with(3)


# =====================
# --- Template & Import ---
# =====================
@pytest.mark.asyncio
@patch("app.question.routes.TemplateService.build", new_callable=AsyncMock)
async def test_download_template(
    mock_build: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_owner_user: User,
) -> None:
    mock_build.return_value = TemplateFile(
        filename="questions-export-casa-2026-01-01.csv",
        media_type="text/csv",
        content=",".join(CSV_HEADERS) + "\n",
    )
    response = await async_client.get(
        "/admin/questions/template", params={"property_type_id": 1, "type": "export"}
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/csv")
    assert (
        response.headers["content-disposition"]
        == 'attachment; filename="questions-export-casa-2026-01-01.csv"'
    )
    assert response.text.startswith("property_type_id,category_id")
    mock_build.assert_awaited_once_with(1, "csv", "export")


@pytest.mark.asyncio
async def test_download_template_unknown_format(
    async_client: AsyncClient, override_get_db: None, mock_current_admin_user: User
) -> None:
    response = await async_client.get("/admin/questions/template", params={"format": "pdf"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
@patch("app.question.routes.BulkImportService.run", new_callable=AsyncMock)
async def test_bulk_import_requires_import_role(
    mock_run: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_owner_user: User,
) -> None:
    payload = {"property_type_id": 1, "rows": [IMPORT_ROW]}
    response = await async_client.post("/admin/questions/bulk-import", json=payload)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Access denied for role: OWNER"
    mock_run.assert_not_awaited()


@pytest.mark.asyncio
@patch("app.question.routes.BulkImportService.run", new_callable=AsyncMock)
async def test_bulk_import_json(
    mock_run: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_run.return_value = BulkImportResult(
        message="Imported 2 rows into 'Casă' (replace mode)",
        categories_created=1,
        questions_created=1,
        answers_created=2,
    )
    payload = {
        "property_type_id": 1,
        "mode": "replace",
        "rows": [IMPORT_ROW, {**IMPORT_ROW, "answer_ro": "Nu", "answer_weight": 0}],
    }
    response = await async_client.post("/admin/questions/bulk-import", json=payload)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["answers_created"] == 2
    sent = mock_run.call_args.args[0]
    assert sent.mode == "replace"
    assert len(sent.rows) == 2


@pytest.mark.asyncio
@patch("app.question.routes.BulkImportService.run", new_callable=AsyncMock)
async def test_bulk_import_csv_upload(
    mock_run: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_run.return_value = BulkImportResult(message="Imported 2 rows into 'Casă' (append mode)")
    content = "\n".join(
        [
            ",".join(CSV_HEADERS),
            "1,0,Utilități,Utilities,0,Este terenul racordat?,,10,0,Da,Yes,10",
            "1,0,Utilități,Utilities,0,Este terenul racordat?,,10,0,Nu,No,0",
        ]
    ).encode("utf-8")
    response = await async_client.post(
        "/admin/questions/bulk-import/csv",
        data={"property_type_id": "1"},
        files={"file": ("questions.csv", content, "text/csv")},
    )
    assert response.status_code == status.HTTP_200_OK
    sent = mock_run.call_args.args[0]
    assert sent.property_type_id == 1
    assert sent.mode == "append"
    assert [r.answer_ro for r in sent.rows] == ["Da", "Nu"]


@pytest.mark.asyncio
@patch("app.question.routes.BulkImportService.run", new_callable=AsyncMock)
async def test_bulk_import_csv_invalid_file(
    mock_run: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    response = await async_client.post(
        "/admin/questions/bulk-import/csv",
        data={"property_type_id": "1"},
        files={"file": ("questions.csv", b"just,some,columns\n1,2,3\n", "text/csv")},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "missing required columns" in response.json()["detail"]
    mock_run.assert_not_awaited()


def _workbook_bytes(rows: list[list]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Questions"
    for row in rows:
        sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.mark.asyncio
@patch("app.question.routes.BulkImportService.run", new_callable=AsyncMock)
async def test_bulk_import_xlsx_upload(
    mock_run: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_run.return_value = BulkImportResult(message="Imported 2 rows into 'Casă' (replace mode)")
    content = _workbook_bytes(
        [
            CSV_HEADERS,
            [1, 0, "Utilități", "Utilities", 0, "Este terenul racordat?", None, 10, 0, "Da", "Yes", 10],
            [1, 0, "Utilități", "Utilities", 0, "Este terenul racordat?", None, 10, 0, "Nu", "No", 0],
        ]
    )
    response = await async_client.post(
        "/admin/questions/bulk-import/xlsx",
        data={"property_type_id": "1", "mode": "replace"},
        files={"file": ("questions.xlsx", content, XLSX_MEDIA_TYPE)},
    )
    assert response.status_code == status.HTTP_200_OK
    sent = mock_run.call_args.args[0]
    assert sent.mode == "replace"
    assert [(r.answer_ro, r.answer_weight) for r in sent.rows] == [("Da", 10), ("Nu", 0)]
    assert sent.rows[0].question_weight == 10


@pytest.mark.asyncio
@patch("app.question.routes.BulkImportService.run", new_callable=AsyncMock)
async def test_bulk_import_xlsx_rejects_non_workbook(
    mock_run: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    response = await async_client.post(
        "/admin/questions/bulk-import/xlsx",
        data={"property_type_id": "1"},
        files={"file": ("questions.xlsx", b"not a zip archive", XLSX_MEDIA_TYPE)},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "File is not a valid .xlsx workbook"
    mock_run.assert_not_awaited()


# =====================
# --- Answers ---
# =====================
@pytest.mark.asyncio
@patch("app.question.routes.AnswerService.create", new_callable=AsyncMock)
async def test_create_answer(
    mock_create: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_create.return_value = AnswerRead(id=9, text_ro="Parțial", weight=5, question_id=1)
    response = await async_client.post(
        "/admin/answers", json={"text_ro": "Parțial", "weight": 5, "question_id": 1}
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["id"] == 9


@pytest.mark.asyncio
@patch("app.question.routes.AnswerService.list_answers", new_callable=AsyncMock)
async def test_list_answers(
    mock_list: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_list.return_value = [
        SimpleNamespace(id=1, text_ro="Da", text_en=None, weight=10, question_id=1)
    ]
    response = await async_client.get("/admin/answers", params={"question_id": 1})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()[0]["text_ro"] == "Da"


@pytest.mark.asyncio
@patch("app.question.routes.AnswerService.delete", new_callable=AsyncMock)
async def test_delete_last_answers_conflict(
    mock_delete: AsyncMock,
    async_client: AsyncClient,
    override_get_db: None,
    mock_current_admin_user: User,
) -> None:
    mock_delete.side_effect = HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Cannot delete answer. Questions must have at least 2 answers.",
    )
    response = await async_client.delete("/admin/answers/1")
    assert response.status_code == status.HTTP_409_CONFLICT
    assert "at least 2 answers" in response.json()["detail"]
