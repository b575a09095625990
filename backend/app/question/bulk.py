"""
backend/app/question/bulk.py

Bulk Question Import
- Parses uploaded CSV or Excel (.xlsx) files in the template layout into import rows
- Upserts categories, questions and answers of one property type by their
  Romanian names, optionally wiping the existing catalog first (replace mode)
"""

import csv
import io
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any
from zipfile import BadZipFile

from fastapi import HTTPException, status
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.category.models import QuestionCategory
from app.core.cache import invalidate_catalog
from app.property_type.models import PropertyType
from app.question import schemas
from app.question.models import Answer, Question
from app.question.schemas import MIN_ANSWERS_PER_QUESTION
from app.question.services import delete_user_answers_for_questions

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "property_type_id",
    "category_id",
    "category_name_ro",
    "category_name_en",
    "question_id",
    "question_ro",
    "question_en",
    "question_weight",
    "answer_id",
    "answer_ro",
    "answer_en",
    "answer_weight",
]
REQUIRED_CSV_COLUMNS = (
    "category_name_ro",
    "question_ro",
    "question_weight",
    "answer_ro",
    "answer_weight",
)
CSV_INSTRUCTIONS = {
    "property_type_id": "Property Type ID (required)",
    "category_id": "0 for new, existing ID to update",
    "category_name_ro": "Category name in Romanian (required)",
    "category_name_en": "Category name in English (optional)",
    "question_id": "0 for new, existing ID to update",
    "question_ro": "Question text in Romanian (required)",
    "question_en": "Question text in English (optional)",
    "question_weight": "Weight 1-100 (importance)",
    "answer_id": "0 for new, existing ID to update",
    "answer_ro": "Answer text in Romanian (required)",
    "answer_en": "Answer text in English (optional)",
    "answer_weight": "Weight 0-100 (answer value)",
}


# ---------------------------------------------------
# File Parsing (CSV / Excel)
# ---------------------------------------------------
XLSX_SHEET_NAME = "Questions"


def _is_instruction_row(row: dict) -> bool:
    return (row.get("question_weight") or "").strip() == CSV_INSTRUCTIONS["question_weight"]


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _rows_from_records(
    kind: str, fieldnames: Iterable[str], records: Iterable[tuple[int, dict[str, str]]]
) -> list[schemas.BulkImportRow]:
    """
    Validate (row number, values) records read from an upload. The instruction
    row of a generated template and blank lines are skipped; any invalid row
    fails the whole file with a 400 listing the offending row numbers.
    """
    present = set(fieldnames)
    missing = [col for col in REQUIRED_CSV_COLUMNS if col not in present]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{kind} file is missing required columns: {', '.join(missing)}",
        )

    rows: list[schemas.BulkImportRow] = []
    errors: list[str] = []
    for row_number, values in records:
        if not any(v.strip() for v in values.values()) or _is_instruction_row(values):
            continue
        data = {name: values.get(name, "") for name in schemas.BulkImportRow.model_fields}
        try:
            rows.append(schemas.BulkImportRow.model_validate(data))
        except ValidationError as e:
            problems = ", ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            errors.append(f"Row {row_number}: {problems}")

    if errors:
        logger.warning(f"[BULK IMPORT] {kind} rejected, {len(errors)} invalid rows")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {kind} rows. " + "; ".join(errors),
        )
    if not rows:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"{kind} file contains no data rows"
        )
    return rows


def parse_csv_rows(content: bytes) -> list[schemas.BulkImportRow]:
    """Turn an uploaded CSV in the template layout into import rows."""
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="CSV file must be UTF-8 encoded"
        )

    reader = csv.DictReader(io.StringIO(text))
    records = (
        (row_number, {key: (value or "") for key, value in raw.items() if key})
        for row_number, raw in enumerate(reader, start=2)
    )
    return _rows_from_records("CSV", reader.fieldnames or [], records)


def parse_xlsx_rows(content: bytes) -> list[schemas.BulkImportRow]:
    """
    Turn an uploaded .xlsx workbook into import rows. Reads the "Questions"
    sheet of a generated template, or the first sheet of any other workbook.
    """
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError, OSError) as e:
        logger.warning(f"[BULK IMPORT] Unreadable Excel upload: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="File is not a valid .xlsx workbook"
        )

    try:
        sheet = (
            workbook[XLSX_SHEET_NAME]
            if XLSX_SHEET_NAME in workbook.sheetnames
            else workbook.worksheets[0]
        )
        lines = [[_cell_text(v) for v in line] for line in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    if not lines:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Excel file contains no data rows"
        )
    header = [name.strip() for name in lines[0]]
    records = (
        (row_number, {name: value for name, value in zip(header, line) if name})
        for row_number, line in enumerate(lines[1:], start=2)
    )
    return _rows_from_records("Excel", header, records)


# ---------------------------------------------------
# Import
# ---------------------------------------------------
@dataclass
class _QuestionGroup:
    category_name_ro: str
    category_name_en: str | None
    question_ro: str
    question_en: str | None
    question_weight: int
    answers: dict[str, schemas.BulkImportRow] = field(default_factory=dict)


def group_rows(rows: list[schemas.BulkImportRow]) -> list[_QuestionGroup]:
    """Collapse answer rows into questions; the last row wins for repeated answers."""
    groups: dict[tuple[str, str], _QuestionGroup] = {}
    for row in rows:
        key = (row.category_name_ro, row.question_ro)
        group = groups.get(key)
        if group is None:
            group = groups[key] = _QuestionGroup(
                category_name_ro=row.category_name_ro,
                category_name_en=row.category_name_en,
                question_ro=row.question_ro,
                question_en=row.question_en,
                question_weight=row.question_weight,
            )
        group.answers[row.answer_ro] = row
    return list(groups.values())


class BulkImportService:
    """Imports a flat list of answer rows into the catalog of one property type."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _clear_property_type(self, property_type_id: int) -> None:
        category_ids = select(QuestionCategory.id).where(
            QuestionCategory.property_type_id == property_type_id
        )
        question_ids = list(
            (
                await self.db.execute(
                    select(Question.id).where(Question.category_id.in_(category_ids))
                )
            ).scalars()
        )
        await delete_user_answers_for_questions(self.db, question_ids)
        if question_ids:
            await self.db.execute(delete(Answer).where(Answer.question_id.in_(question_ids)))
            await self.db.execute(delete(Question).where(Question.id.in_(question_ids)))
        await self.db.execute(
            delete(QuestionCategory).where(QuestionCategory.property_type_id == property_type_id)
        )
        logger.info(f"[BULK IMPORT] Cleared catalog of property type {property_type_id}")

    async def run(self, payload: schemas.BulkImportRequest) -> schemas.BulkImportResult:
        property_type = await self.db.get(PropertyType, payload.property_type_id)
        if not property_type:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Property type not found"
            )

        groups = group_rows(payload.rows)
        result = schemas.BulkImportResult(message="")

        if payload.mode == "replace":
            await self._clear_property_type(property_type.id)

        categories = {
            c.name_ro: c
            for c in (
                await self.db.execute(
                    select(QuestionCategory).where(
                        QuestionCategory.property_type_id == property_type.id
                    )
                )
            ).scalars()
        }
        existing_questions = (
            await self.db.execute(
                select(Question)
                .where(Question.category_id.in_([c.id for c in categories.values()]))
                .options(selectinload(Question.answers))
            )
        ).scalars().all()
        questions = {(q.category_id, q.text_ro): q for q in existing_questions}
        answers = {(a.question_id, a.text_ro): a for q in existing_questions for a in q.answers}

        for group in groups:
            category = categories.get(group.category_name_ro)
            known = category is not None and (category.id, group.question_ro) in questions
            if not known and len(group.answers) < MIN_ANSWERS_PER_QUESTION:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"New question '{group.question_ro}' needs at least "
                    f"{MIN_ANSWERS_PER_QUESTION} answers",
                )

        for group in groups:
            category = categories.get(group.category_name_ro)
            if category is None:
                category = QuestionCategory(
                    name_ro=group.category_name_ro,
                    name_en=group.category_name_en,
                    property_type_id=property_type.id,
                )
                self.db.add(category)
                await self.db.flush()
                categories[category.name_ro] = category
                result.categories_created += 1
            elif group.category_name_en:
                category.name_en = group.category_name_en

            question = questions.get((category.id, group.question_ro))
            if question is None:
                question = Question(
                    category_id=category.id,
                    text_ro=group.question_ro,
                    text_en=group.question_en,
                    weight=group.question_weight,
                )
                self.db.add(question)
                await self.db.flush()
                questions[(category.id, question.text_ro)] = question
                result.questions_created += 1
            else:
                question.text_en = group.question_en or question.text_en
                question.weight = group.question_weight
                result.questions_updated += 1

            for row in group.answers.values():
                answer = answers.get((question.id, row.answer_ro))
                if answer is None:
                    answer = Answer(
                        question_id=question.id,
                        text_ro=row.answer_ro,
                        text_en=row.answer_en,
                        weight=row.answer_weight,
                    )
                    self.db.add(answer)
                    answers[(question.id, answer.text_ro)] = answer
                    result.answers_created += 1
                else:
                    answer.text_en = row.answer_en or answer.text_en
                    answer.weight = row.answer_weight
                    result.answers_updated += 1

        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(
                f"[BULK IMPORT] Import into property type {property_type.id} failed, rolled back"
            )
            raise
        await invalidate_catalog()

        result.message = (
            f"Imported {len(payload.rows)} rows into '{property_type.name_ro}' "
            f"({payload.mode} mode)"
        )
        logger.info(f"[BULK IMPORT] {result.message}: {result.model_dump(exclude={'message'})}")
        return result
