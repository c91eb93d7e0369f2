from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

import fitz
import openpyxl
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from employee_directory.models.employee import Employee

logger = logging.getLogger(__name__)

PDF_TITLE = "Employee List"
SHEET_NAME = "Employees"
SPREADSHEET_COLUMNS: tuple[str, ...] = ("employee_tag", "username", "email", "phoneNumber")

# layout in points on an A4 page
PAGE_WIDTH, PAGE_HEIGHT = fitz.paper_size("a4")
LEFT_MARGIN = 40
TITLE_Y = 57
FIRST_LINE_Y = 85
LINE_SPACING = 28
BOTTOM_MARGIN = 40
TITLE_FONT_SIZE = 18
BODY_FONT_SIZE = 12


class ExportFormat(str, Enum):
    PDF = "pdf"
    XLSX = "xlsx"

    @property
    def filename(self) -> str:
        return f"employee-list.{self.value}"

    @property
    def media_type(self) -> str:
        if self is ExportFormat.PDF:
            return "application/pdf"
        return "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ExportError(Exception):
    pass


def _cell_text(value: str) -> str:
    return ILLEGAL_CHARACTERS_RE.sub("", value)


class ExportService:
    def pdf_lines(self, records: Sequence[Employee]) -> list[str]:
        return [
            f"{index}. {employee.username} - {employee.phone_number} - {employee.email}"
            for index, employee in enumerate(records, start=1)
        ]

    def render_pdf(self, records: Sequence[Employee]) -> bytes:
        try:
            with fitz.open() as doc:
                doc.set_metadata({"title": PDF_TITLE})
                page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
                page.insert_text((LEFT_MARGIN, TITLE_Y), PDF_TITLE, fontsize=TITLE_FONT_SIZE)

                y = FIRST_LINE_Y
                for line in self.pdf_lines(records):
                    if y > PAGE_HEIGHT - BOTTOM_MARGIN:
                        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
                        y = TITLE_Y
                    page.insert_text((LEFT_MARGIN, y), line, fontsize=BODY_FONT_SIZE)
                    y += LINE_SPACING

                return doc.tobytes()
        except Exception as e:
            logger.error("PDF export failed: %s", e)
            raise ExportError(f"Failed to render PDF: {e}") from e

    def render_spreadsheet(self, records: Sequence[Employee]) -> bytes:
        try:
            wb = openpyxl.Workbook()
            ws = wb.active
            ws.title = SHEET_NAME

            ws.append(list(SPREADSHEET_COLUMNS))
            for cell in ws[1]:
                cell.font = Font(bold=True)

            for row_idx, employee in enumerate(records, start=2):
                row = employee.model_dump(by_alias=True)
                for col, column in enumerate(SPREADSHEET_COLUMNS, 1):
                    cell = ws.cell(row=row_idx, column=col, value=_cell_text(row[column]))
                    # values are text, never formulas
                    cell.data_type = "s"

            for col, column in enumerate(SPREADSHEET_COLUMNS, 1):
                longest = max((len(str(r[col - 1].value or "")) for r in ws.iter_rows(min_row=2)), default=0)
                ws.column_dimensions[get_column_letter(col)].width = max(longest, len(column)) + 2

            buf = io.BytesIO()
            wb.save(buf)
            return buf.getvalue()
        except Exception as e:
            logger.error("Spreadsheet export failed: %s", e)
            raise ExportError(f"Failed to render spreadsheet: {e}") from e

    def render(self, records: Sequence[Employee], fmt: ExportFormat) -> bytes:
        if fmt is ExportFormat.PDF:
            return self.render_pdf(records)
        return self.render_spreadsheet(records)

    def write(self, records: Sequence[Employee], directory: Path, fmt: ExportFormat) -> Path:
        target = directory / fmt.filename
        target.write_bytes(self.render(records, fmt))
        logger.info("Wrote %d employees to %s", len(records), target)
        return target


export_service = ExportService()
