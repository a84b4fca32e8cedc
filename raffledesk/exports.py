"""Comma-separated and printable exports of prize-wheel participants.

Both formats read the same camel-cased wheel-entry records and switch their
column set between the "spun" view (entries that spun the wheel) and the
"registered" view (entries that only registered).
"""

from __future__ import annotations

import csv
import io
import re
from typing import Any, Iterable, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .db.utils import parse_dt

SPUN = "spun"
REGISTERED = "registered"
VIEWS = (SPUN, REGISTERED)

CSV_HEADERS = {
    SPUN: ["Name", "Email", "Phone", "Prize", "Spun at"],
    REGISTERED: ["Name", "Email", "Phone", "Registered at"],
}
PDF_HEADERS = {
    SPUN: ["Name", "Contact", "Prize", "Spun at"],
    REGISTERED: ["Name", "Contact", "Registered at"],
}
PDF_TITLES = {SPUN: "Participants - Spun", REGISTERED: "Participants - Registered"}

Record = dict[str, Any]


def split_wheel_entries(entries: Iterable[Record]) -> tuple[list[Record], list[Record]]:
    """Return ``(spun, registered_only)`` preserving input order."""
    spun: list[Record] = []
    registered: list[Record] = []
    for entry in entries:
        (spun if entry.get("spunAt") else registered).append(entry)
    return spun, registered


def format_timestamp(value: Optional[str]) -> str:
    """``2025-09-12T14:05:00+00:00`` -> ``12/09/2025 14:05:00``."""
    dt = parse_dt(value) if value else None
    return dt.strftime("%d/%m/%Y %H:%M:%S") if dt else ""


def export_filename(view: str, company_name: str, extension: str) -> str:
    safe_name = re.sub(r"\s+", "_", company_name or "")
    return f"participants_wheel_{view}_{safe_name}.{extension}"


def _check_view(view: str) -> None:
    if view not in VIEWS:
        raise ValueError(f"view must be one of {VIEWS}, got {view!r}")


def csv_rows(entries: Sequence[Record], view: str) -> list[list[str]]:
    _check_view(view)
    rows = []
    for entry in entries:
        row = [entry.get("name") or "", entry.get("email") or "", entry.get("phone") or ""]
        if view == SPUN:
            row += [entry.get("prizeName") or "", format_timestamp(entry.get("spunAt"))]
        else:
            row.append(format_timestamp(entry.get("createdAt")))
        rows.append(row)
    return rows


def wheel_entries_csv(entries: Sequence[Record], view: str) -> bytes:
    """UTF-8 CSV (with BOM so spreadsheet apps pick the encoding), all cells quoted."""
    rows = csv_rows(entries, view)
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS[view])
    writer.writerows(rows)
    return ("\ufeff" + output.getvalue()).encode("utf-8")


def wheel_entries_pdf(entries: Sequence[Record], view: str) -> bytes:
    """Paginated A4 table; the header row repeats on every page."""
    _check_view(view)
    body = []
    for entry in entries:
        contact = f"{entry.get('email') or ''}\n{entry.get('phone') or ''}"
        row = [entry.get("name") or "", contact]
        if view == SPUN:
            row += [entry.get("prizeName") or "", format_timestamp(entry.get("spunAt"))]
        else:
            row.append(format_timestamp(entry.get("createdAt")))
        body.append(row)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=PDF_TITLES[view],
    )
    table = Table([PDF_HEADERS[view], *body], repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#00D1FF")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F2F2F2")]),
            ]
        )
    )
    styles = getSampleStyleSheet()
    doc.build([Paragraph(PDF_TITLES[view], styles["Title"]), Spacer(1, 4 * mm), table])
    return buffer.getvalue()


__all__ = [
    "REGISTERED",
    "SPUN",
    "export_filename",
    "format_timestamp",
    "split_wheel_entries",
    "wheel_entries_csv",
    "wheel_entries_pdf",
]
