"""
utils/export.py — Schedule export as pipe-delimited text or Excel.

Text export is the format the import accepts back (header line first).
Excel export uses openpyxl: one sheet, styled header row,
category-colored cells.
Columns: 开始日期, 结束日期, 农事活动, 详细处理事项, 排期类型.
"""

from io import BytesIO

from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from models import ScheduleType
from schedule_codec import serialize_schedule


# Fixed category colors (custom follows the green palette in exports)
CATEGORY_FILLS = {
    ScheduleType.SCIENCE: PatternFill(start_color='3B82F6', end_color='3B82F6', fill_type='solid'),
    ScheduleType.RECLAMATION: PatternFill(start_color='A855F7', end_color='A855F7', fill_type='solid'),
    ScheduleType.LOCAL: PatternFill(start_color='F59E0B', end_color='F59E0B', fill_type='solid'),
    ScheduleType.CUSTOM: PatternFill(start_color='10B981', end_color='10B981', fill_type='solid'),
}

HEADER_FONT = Font(name='Calibri', bold=True, color='FFFFFF', size=11)
HEADER_FILL = PatternFill(start_color='059669', end_color='059669', fill_type='solid')
HEADER_ALIGNMENT = Alignment(horizontal='center', vertical='center', wrap_text=True)
HEADER_BORDER = Border(
    bottom=Side(style='thin', color='047857'),
    right=Side(style='thin', color='E2E8F0'),
)
CELL_BORDER = Border(
    bottom=Side(style='thin', color='E2E8F0'),
    right=Side(style='thin', color='E2E8F0'),
)

COLUMNS = ['开始日期', '结束日期', '农事活动', '详细处理事项', '排期类型']


def generate_text(schedule_type, tasks):
    """Return (bytes, filename) for a text export, named by file code."""
    schedule_type = ScheduleType(schedule_type)
    content = serialize_schedule(tasks)
    return content.encode('utf-8'), schedule_type.file_name


def _build_sheet(ws, tasks):
    """Populate a worksheet with task rows and a styled header."""
    for col_idx, col_name in enumerate(COLUMNS, 1):
        cell = ws.cell(row=1, column=col_idx, value=col_name)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = HEADER_BORDER

    for row_idx, task in enumerate(tasks, 2):
        ws.cell(row=row_idx, column=1, value=task.start_date).border = CELL_BORDER
        ws.cell(row=row_idx, column=2, value=task.end_date).border = CELL_BORDER
        ws.cell(row=row_idx, column=3, value=task.activity).border = CELL_BORDER
        ws.cell(row=row_idx, column=4, value=task.notes or '').border = CELL_BORDER

        type_cell = ws.cell(row=row_idx, column=5, value=task.type.label)
        type_cell.border = CELL_BORDER
        type_cell.fill = CATEGORY_FILLS[task.type]
        type_cell.font = Font(color='FFFFFF', bold=True)

    ws.column_dimensions['A'].width = 14
    ws.column_dimensions['B'].width = 14
    ws.column_dimensions['C'].width = 16
    ws.column_dimensions['D'].width = 40
    ws.column_dimensions['E'].width = 18

    ws.freeze_panes = 'A2'


def generate_excel(schedule_type, tasks):
    """Generate an Excel workbook for one category.

    Returns:
        (BytesIO buffer, filename)
    """
    import openpyxl

    schedule_type = ScheduleType(schedule_type)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = schedule_type.file_code

    _build_sheet(ws, tasks)

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)

    filename = f"{schedule_type.file_code}_{schedule_type.value}.xlsx"
    return buffer, filename
