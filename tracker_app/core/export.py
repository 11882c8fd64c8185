"""Spreadsheet and CSV export of the full issue collection."""

from __future__ import annotations

import io
from collections.abc import Iterable

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .column_config import get_columns
from .config import ISSUE_FIELDS, SETTINGS
from .models import IssueModel, to_wire_name

SHEET_NAME = "Issues"


def _comment_lines(comments) -> str:
    return "\n".join(f"{c.author}: {c.content}" for c in comments)


def export_columns() -> list[str]:
    """Wire names of the ``export`` column set (every issue field by default)."""
    return [to_wire_name(c) for c in get_columns("export")] or list(ISSUE_FIELDS)


def issues_export_frame(issues: Iterable[IssueModel]) -> pd.DataFrame:
    """Flat table with one column per exported wire field and list fields joined as text."""
    rows = []
    for issue in issues:
        row = issue.to_dict()
        row["attachments"] = ", ".join(issue.attachments)
        row["comments"] = _comment_lines(issue.comments)
        rows.append(row)
    return pd.DataFrame(rows, columns=export_columns())


def export_issues_xlsx(issues: Iterable[IssueModel]) -> io.BytesIO:
    """Return a BytesIO buffer holding an ``Issues`` workbook."""
    frame = issues_export_frame(issues)
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        ws = writer.sheets[SHEET_NAME]
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for idx, column in enumerate(frame.columns, start=1):
            longest = max([len(str(column)), *(len(str(v)) for v in frame[column])])
            ws.column_dimensions[get_column_letter(idx)].width = min(longest + 2, 60)
    buf.seek(0)
    return buf


def export_csv(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode(SETTINGS.download_encoding)
