"""
Export service — generate CSV and Excel files from the Events panel.

Exports cover the full filtered and sorted event list for a dashboard
state, not just the visible page.  All export functions return a
BytesIO buffer ready to be sent as a Flask response with the
appropriate content type.
"""

import csv
import io
import logging

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from assettrack.services.dashboard_service import DashboardSummary
from assettrack.services.view_service import EventRow

logger = logging.getLogger(__name__)

# Excel header styling constants.
_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill(start_color="2B579A", end_color="2B579A", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", wrap_text=True)
_CURRENCY_FORMAT = '#,##0.00'
_DATE_FORMAT = "mm/dd/yyyy"

EVENT_HEADERS = [
    "Date",
    "Days",
    "Type",
    "Name",
    "Details",
    "Item Type",
    "Parent",
    "Notes",
    "Status",
]


# =========================================================================
# CSV Exports
# =========================================================================

def export_events_csv(rows: list[EventRow]) -> io.BytesIO:
    """
    Export event rows to CSV.

    Args:
        rows: EventRow objects, already filtered and sorted.

    Returns:
        BytesIO buffer containing the CSV data.
    """
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(EVENT_HEADERS)
    for row in rows:
        writer.writerow(_event_values(row, row.formatted_date))

    # Convert to bytes for Flask response.
    buffer = io.BytesIO()
    buffer.write(output.getvalue().encode("utf-8-sig"))
    buffer.seek(0)
    logger.info("Exported %d event(s) to CSV", len(rows))
    return buffer


# =========================================================================
# Excel Exports
# =========================================================================

def export_events_excel(
    rows: list[EventRow],
    summary: DashboardSummary | None = None,
) -> io.BytesIO:
    """
    Export event rows to an Excel workbook.

    Args:
        rows:    EventRow objects, already filtered and sorted.
        summary: When given, written to a second "Summary" sheet.

    Returns:
        BytesIO buffer containing the .xlsx data.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Events"

    _write_header_row(ws, EVENT_HEADERS)
    for row_idx, row in enumerate(rows, start=2):
        for col_idx, value in enumerate(_event_values(row, row.date), start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)
        ws.cell(row=row_idx, column=1).number_format = _DATE_FORMAT

    _auto_fit_columns(ws)

    if summary is not None:
        _write_summary_sheet(wb, summary)

    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    logger.info("Exported %d event(s) to Excel", len(rows))
    return buffer


# =========================================================================
# Internal helpers
# =========================================================================

def _event_values(row: EventRow, date_value) -> list:
    return [
        date_value,
        row.days_text,
        row.type_label,
        row.name or "",
        row.details,
        row.asset_type,
        row.parent_label or "",
        row.notes or "",
        row.urgency,
    ]


def _write_summary_sheet(wb, summary: DashboardSummary) -> None:
    ws = wb.create_sheet("Summary")
    _write_header_row(ws, ["Metric", "Value"])

    stats = summary.warranty_stats
    lines = [
        ("Total Assets", summary.total_assets),
        ("Total Components", summary.total_components),
        ("Total Value", float(summary.total_value)),
        ("Warranties", stats.total),
        ("Expiring Within 60 Days", stats.within60),
        ("Expiring Within 30 Days", stats.within30),
        ("Expired", stats.expired),
        ("Active", stats.active),
    ]
    for row_idx, (label, value) in enumerate(lines, start=2):
        ws.cell(row=row_idx, column=1, value=label)
        ws.cell(row=row_idx, column=2, value=value)
    ws.cell(row=4, column=2).number_format = _CURRENCY_FORMAT

    _auto_fit_columns(ws)


def _write_header_row(ws, headers: list[str]) -> None:
    """Write a styled header row to an Excel worksheet."""
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGN


def _auto_fit_columns(ws) -> None:
    """Auto-fit column widths based on content (approximate)."""
    for col in ws.columns:
        max_length = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = min(max_length + 4, 40)
