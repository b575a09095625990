"""
backend/app/question/templates.py

Downloadable import templates and catalog exports (CSV, Excel or Markdown).
Excel workbooks carry a styled header and instruction row plus an
"Instructions" sheet.
"""

import csv
import io
import logging
import re
import unicodedata
from dataclasses import dataclass
from datetime import date
from typing import Literal

from fastapi import HTTPException, status
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.property_type.models import PropertyType
from app.property_type.services import PropertyTypeService
from app.question.bulk import CSV_HEADERS, CSV_INSTRUCTIONS, XLSX_SHEET_NAME
from app.question.schemas import MIN_ANSWERS_PER_QUESTION

logger = logging.getLogger(__name__)

TemplateFormat = Literal["csv", "xlsx", "markdown"]
TemplateKind = Literal["template", "export"]

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLSX_COLUMN_WIDTHS = [15, 12, 25, 25, 12, 50, 50, 15, 10, 40, 40, 15]
HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(fill_type="solid", fgColor="366092")
INSTRUCTION_FONT = Font(italic=True, color="666666")
INSTRUCTION_FILL = PatternFill(fill_type="solid", fgColor="F0F0F0")

SAMPLE_ROWS = [
    [
        "0",
        "Utilități",
        "Utilities",
        "0",
        "Este terenul racordat la apă, canal, curent și gaz?",
        "Is the land connected to water, sewage, electricity and gas?",
        "10",
        "0",
        "Da, integral racordat",
        "Yes, fully connected",
        "10",
    ],
    [
        "0",
        "Utilități",
        "Utilities",
        "0",
        "Este terenul racordat la apă, canal, curent și gaz?",
        "Is the land connected to water, sewage, electricity and gas?",
        "10",
        "0",
        "Parțial racordat",
        "Partially connected",
        "5",
    ],
]


@dataclass
class TemplateFile:
    filename: str
    media_type: str
    content: str | bytes


def _slugify(value: str) -> str:
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", ascii_value.lower()).strip("-") or "property-type"


def catalog_rows(property_type: PropertyType) -> list[list[str]]:
    """One CSV row per answer of a fully loaded property type."""
    rows = []
    for category in property_type.categories:
        for question in category.questions:
            for answer in question.answers:
                rows.append(
                    [
                        str(property_type.id),
                        str(category.id),
                        category.name_ro,
                        category.name_en or "",
                        str(question.id),
                        question.text_ro,
                        question.text_en or "",
                        str(question.weight),
                        str(answer.id),
                        answer.text_ro,
                        answer.text_en or "",
                        str(answer.weight),
                    ]
                )
    return rows


def render_csv(rows: list[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


GUIDE_RULES = [
    "Romanian text is required, English is optional",
    "Question weights go from 1 to 100, answer weights from 0 to 100",
    f"Every question needs at least {MIN_ANSWERS_PER_QUESTION} answers",
    "Rows with the same category and question text belong to the same question",
    "Existing categories, questions and answers are matched by their Romanian text and updated",
]
IMPORT_MODES = [
    "append (default): adds new entries and updates matching ones",
    "replace: deletes the property type's categories, questions and answers first",
]


def render_markdown(
    property_types: list[PropertyType], selected: PropertyType | None, sample: str
) -> str:
    available = "\n".join(f"- ID: {pt.id} - {pt.name_ro}" for pt in property_types)
    rules = "\n".join(f"- {rule}" for rule in GUIDE_RULES)
    modes = "\n".join(f"- {mode}" for mode in IMPORT_MODES)
    return f"""# Questions Import Template

## Property Type: {selected.name_ro if selected else "All Types"}

### Instructions:
{rules}

### Available Property Types:
{available or "- none"}

### Template Format:

```csv
{sample}```

### Import Modes:
{modes}
"""


def _xlsx_value(value: str) -> str | int:
    return int(value) if value.isdigit() else value


def render_xlsx(
    rows: list[list[str]],
    property_types: list[PropertyType],
    selected: PropertyType | None,
    instruction_row: bool = True,
) -> bytes:
    """
    Workbook with `rows` on the "Questions" sheet (row 1 is the header, row 2
    the instruction row when `instruction_row` is set) and the import guide on
    an "Instructions" sheet.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = XLSX_SHEET_NAME
    for row in rows:
        sheet.append([_xlsx_value(value) for value in row])
    for index, width in enumerate(XLSX_COLUMN_WIDTHS, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width
    for cell in sheet[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")
    if instruction_row and sheet.max_row >= 2:
        for cell in sheet[2]:
            cell.font = INSTRUCTION_FONT
            cell.fill = INSTRUCTION_FILL
            cell.alignment = Alignment(horizontal="left", vertical="center")
    sheet.freeze_panes = "A2"

    guide = workbook.create_sheet("Instructions")
    guide.column_dimensions["A"].width = 100
    guide.append(["Questions Import Template"])
    guide["A1"].font = Font(bold=True, size=14)
    guide.append([f"Property Type: {selected.name_ro if selected else 'All Types'}"])
    guide.append([])
    guide.append(["Instructions:"])
    for rule in GUIDE_RULES:
        guide.append([f"- {rule}"])
    guide.append([])
    guide.append(["Available Property Types:"])
    for pt in property_types:
        guide.append([f"- ID: {pt.id} - {pt.name_ro}"])
    guide.append([])
    guide.append(["Import Modes:"])
    for mode in IMPORT_MODES:
        guide.append([f"- {mode}"])

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TemplateService:
    """Builds import templates and exports for the admin download endpoint."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _all_property_types(self) -> list[PropertyType]:
        return list(
            (await self.db.execute(select(PropertyType).order_by(PropertyType.id))).scalars()
        )

    async def build(
        self,
        property_type_id: int | None,
        fmt: TemplateFormat = "csv",
        kind: TemplateKind = "template",
    ) -> TemplateFile:
        if kind == "export" and property_type_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="property_type_id is required for exports",
            )

        selected = None
        if property_type_id is not None:
            selected = await PropertyTypeService(self.db).get_property_type_or_404(
                property_type_id, depth=3
            )
        existing = catalog_rows(selected) if selected else []
        today = date.today().isoformat()
        prefix = "questions-export" if kind == "export" else "questions-template"
        stem = f"{prefix}-{_slugify(selected.name_ro)}-{today}" if selected else f"{prefix}-{today}"
        target_id = str(selected.id) if selected else "1"

        if fmt == "markdown":
            sample = render_csv(
                [CSV_HEADERS] + (existing or [[target_id, *row] for row in SAMPLE_ROWS])
            )
            content = render_markdown(await self._all_property_types(), selected, sample)
            logger.info(f"[TEMPLATE] Markdown {kind} generated for property type {property_type_id}")
            return TemplateFile(filename=f"{stem}.md", media_type="text/markdown", content=content)

        if kind == "export":
            rows = [CSV_HEADERS, *existing]
        else:
            instructions = [CSV_INSTRUCTIONS[name] for name in CSV_HEADERS]
            if selected:
                instructions[0] = target_id
            rows = [CSV_HEADERS, instructions]
            rows.extend(existing or [[target_id, *row] for row in SAMPLE_ROWS[:1]])

        if fmt == "xlsx":
            workbook = render_xlsx(
                rows, await self._all_property_types(), selected, instruction_row=kind == "template"
            )
            logger.info(f"[TEMPLATE] Excel {kind} generated for property type {property_type_id}")
            return TemplateFile(filename=f"{stem}.xlsx", media_type=XLSX_MEDIA_TYPE, content=workbook)

        logger.info(f"[TEMPLATE] CSV {kind} generated for property type {property_type_id}")
        return TemplateFile(filename=f"{stem}.csv", media_type="text/csv", content=render_csv(rows))
