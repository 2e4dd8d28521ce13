# app/services/export_service.py
"""
XLSX rendering for the completed-trips report.
Layout: merged title row, styled header (frozen, filterable), zebra data rows, footer with totals.
"""

from datetime import datetime
from io import BytesIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.utils.timeutils import BR_DATETIME, format_local, utcnow

TITLE = "Completed Trips Report"
SHEET_NAME = "Trip History"

# (row key, header, column width)
COLUMNS = [
    ("account_name", "Employee", 30),
    ("registration_code", "Registration", 12),
    ("job_title", "Job title", 20),
    ("model", "Vehicle", 22),
    ("plate", "Plate", 12),
    ("justification", "Justification", 40),
    ("started_at", "Start", 18),
    ("ended_at", "End", 18),
    ("duration", "Duration", 14),
]

NAVY = "FF003D6D"
BLUE = "FF0066B3"
STRIPE = "FFF8FAFC"
WHITE = "FFFFFFFF"
GRID = "FFE2E8F0"

_header_side = Side(style="thin", color=NAVY)
_grid_side = Side(style="thin", color=GRID)


def export_filename(today: Optional[datetime] = None) -> str:
    return f"fleet_trips_{(today or utcnow()):%Y-%m-%d}.xlsx"


def render_completed_trips_xlsx(rows: list[dict], generated_at: Optional[datetime] = None) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME
    ws.sheet_properties.tabColor = NAVY[2:]
    last_col = get_column_letter(len(COLUMNS))

    ws.merge_cells(f"A1:{last_col}1")
    title = ws["A1"]
    title.value = TITLE
    title.font = Font(name="Arial", size=16, bold=True, color=WHITE)
    title.fill = PatternFill("solid", fgColor=NAVY)
    title.alignment = Alignment(horizontal="center", vertical="center")
    ws.row_dimensions[1].height = 35

    for idx, (_, header, width) in enumerate(COLUMNS, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width
        cell = ws.cell(row=2, column=idx, value=header)
        cell.font = Font(name="Arial", size=11, bold=True, color=WHITE)
        cell.fill = PatternFill("solid", fgColor=BLUE)
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = Border(top=_header_side, bottom=_header_side, left=_header_side, right=_header_side)
    ws.row_dimensions[2].height = 25

    for offset, row in enumerate(rows):
        row_no = 3 + offset
        fill = PatternFill("solid", fgColor=STRIPE if offset % 2 == 0 else WHITE)
        for idx, (key, _, _) in enumerate(COLUMNS, start=1):
            cell = ws.cell(row=row_no, column=idx, value=row.get(key))
            cell.font = Font(name="Arial", size=10)
            cell.fill = fill
            cell.border = Border(bottom=_grid_side, left=_grid_side, right=_grid_side)
            cell.alignment = Alignment(vertical="center", horizontal="left" if idx <= 2 else "center")
        ws.row_dimensions[row_no].height = 22

    footer_row = 3 + len(rows) + 1
    ws.merge_cells(f"A{footer_row}:{last_col}{footer_row}")
    footer = ws.cell(row=footer_row, column=1)
    footer.value = f"Generated at: {format_local(generated_at or utcnow(), BR_DATETIME)} | Total: {len(rows)} trips"
    footer.font = Font(name="Arial", size=9, italic=True, color="FF666666")
    footer.alignment = Alignment(horizontal="right")

    ws.freeze_panes = "A3"
    ws.auto_filter.ref = f"A2:{last_col}2"

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
