"""
Export formats for the planning and the quote.

export_planning_csv:  semicolon CSV of the timeline, UTF-8 with BOM, for
                      spreadsheet tools using a French regional setup.
export_quote_xlsx:    styled "Devis" workbook of the priced quote.

Both are pure serialisers: offering the file for download is the
blueprint's job.
"""

import io
import logging
from datetime import timedelta

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from vrshow.utils.numbers import format_number

logger = logging.getLogger(__name__)

PLANNING_EXPORT_FILENAME = "Planning_VR_SHOW_Export.csv"
CSV_DELIMITER = ";"
UTF8_BOM = "\ufeff"
DEFAULT_DATE_FORMAT = "%d/%m/%Y"

PLANNING_HEADERS = [
    "Ordre",
    "Phase",
    "Metier / Section",
    "Duree (Jours)",
    "Debut estimatif",
    "Fin estimative",
]
TOTAL_LABEL = "TOTAL PROJET"

HEADER_FILL = PatternFill(start_color="0F172A", end_color="0F172A", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
TOTAL_FONT = Font(bold=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

QUOTE_HEADERS = [
    "Poste",
    "Expert",
    "Jours",
    "Coût / J",
    "Coût Interne Total",
    "Prix Vente / J",
    "Total Vente Client",
    "Marge %",
]


def export_planning_csv(tasks, start_date, total_days, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Serialise a generated timeline to the planning CSV document.

    Args:
        tasks: PlanningTask list, in display order.
        start_date: ``date`` the project starts on (day 0).
        total_days: Total load written on the trailing summary row.
        date_format: strftime pattern for the start/end columns.

    Returns:
        The document as text, starting with the byte-order mark.
    """
    rows = [PLANNING_HEADERS]
    for index, task in enumerate(tasks, 1):
        task_start = start_date + timedelta(days=task.start_day)
        task_end = task_start + timedelta(days=task.duration)
        rows.append([
            index,
            task.phase,
            task.name,
            format_number(task.duration),
            task_start.strftime(date_format),
            task_end.strftime(date_format),
        ])
    rows.append(["", "", TOTAL_LABEL, format_number(total_days), "", ""])

    # Fields are written as-is: no quoting, even around ';' or '"'
    content = "\n".join(CSV_DELIMITER.join(str(value) for value in row) for row in rows)
    return UTF8_BOM + content


def _apply_header_style(ws, row: int, col_count: int) -> None:
    for col in range(1, col_count + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _expert_label(line) -> str:
    name = " ".join(p for p in (line.first_name, line.last_name) if p)
    if line.company_name:
        name = f"{name} ({line.company_name})" if name else line.company_name
    return name or line.responder_email or "Direct Admin"


def export_quote_xlsx(project_name: str, lines, stats, margin) -> bytes:
    """Generate the priced quote workbook.

    Args:
        project_name: Shown in the title row.
        lines: Ordered QuoteLine list.
        stats: SummaryStats of the same lines.
        margin: Global margin the lines are priced with.

    Returns:
        The .xlsx file content.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Devis"

    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(QUOTE_HEADERS))
    ws["A1"] = f"Devis — {project_name}"
    ws["A1"].font = Font(size=16, bold=True)
    ws["A2"] = f"Marge globale ciblée : {format_number(margin)}%"
    ws["A2"].font = Font(size=10, italic=True, color="666666")

    header_row = 4
    for col, header in enumerate(QUOTE_HEADERS, 1):
        ws.cell(row=header_row, column=col, value=header)
    _apply_header_style(ws, header_row, len(QUOTE_HEADERS))

    row = header_row
    for line in lines:
        row += 1
        values = [
            line.role,
            _expert_label(line),
            line.days,
            line.unit_cost,
            line.total_cost,
            line.sale_price,
            line.total_sale,
            round(line.line_margin, 1),
        ]
        for col, value in enumerate(values, 1):
            ws.cell(row=row, column=col, value=value).border = THIN_BORDER

    row += 1
    totals = {
        1: "TOTAL PROJET",
        3: stats.total_days,
        5: stats.total_cost,
        7: stats.total_revenue,
        8: round(stats.average_margin, 1),
    }
    for col in range(1, len(QUOTE_HEADERS) + 1):
        cell = ws.cell(row=row, column=col, value=totals.get(col))
        cell.font = TOTAL_FONT
        cell.border = THIN_BORDER

    widths = [42, 30, 8, 10, 18, 14, 18, 10]
    for col, width in enumerate(widths, 1):
        ws.column_dimensions[get_column_letter(col)].width = width

    buf = io.BytesIO()
    wb.save(buf)
    logger.info("Quote workbook generated project=%r lines=%d", project_name, len(lines))
    return buf.getvalue()
