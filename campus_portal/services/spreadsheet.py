"""
Spreadsheet import/export.

parse_spreadsheet(content, filename) -> rows
    First sheet of an .xlsx/.xls workbook, or a .csv file, as a list of
    dicts. Every value is a stripped string; blank cells are "".

export_rows(rows, sheet_name) -> bytes
    One-sheet .xlsx workbook.

pandas does the reading and writing; openpyxl is its Excel engine.
"""

import io
import logging
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from campus_portal.core.errors import PortalValidationError

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = {".xlsx", ".xls"}
CSV_EXTENSIONS = {".csv"}
ALLOWED_EXTENSIONS = EXCEL_EXTENSIONS | CSV_EXTENSIONS
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def normalize_header(header: str) -> str:
    """'Roll No.' -> 'rollno', 'Student_Name' -> 'studentname'"""
    return "".join(ch for ch in str(header).lower() if ch not in " _.-")


def parse_spreadsheet(content: bytes, filename: str) -> List[Dict[str, str]]:
    ext = get_file_extension(filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise PortalValidationError(f"Unsupported file type '{ext}'. Allowed: XLSX, XLS, CSV")

    try:
        if ext in CSV_EXTENSIONS:
            df = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False)
        else:
            df = pd.read_excel(io.BytesIO(content), dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        raise PortalValidationError("The uploaded file is empty.")
    except Exception as e:
        raise PortalValidationError(f"Could not read spreadsheet: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    df = df.fillna("").astype(str).apply(lambda col: col.str.strip())
    rows = [row for row in df.to_dict(orient="records") if any(row.values())]

    if not rows:
        raise PortalValidationError("The uploaded file is empty.")

    logger.info("Parsed %d rows from %s", len(rows), filename)
    return rows


def pick(row: Dict[str, str], aliases: Sequence[str]) -> str:
    """
    Value of the first column whose normalized header matches an alias.
    Aliases are given already normalized ("rollno", "studentname").
    """
    by_header = {normalize_header(k): v for k, v in row.items()}
    for alias in aliases:
        value = by_header.get(alias)
        if value:
            return value
    return ""


def missing_columns(headers: Iterable[str], required: Dict[str, Sequence[str]]) -> List[str]:
    """Names of required columns with none of their aliases present in `headers`."""
    present = {normalize_header(h) for h in headers}
    return [
        name for name, aliases in required.items()
        if not any(alias in present for alias in aliases)
    ]


def export_rows(rows: List[dict], sheet_name: str = "Sheet1", columns: Optional[List[str]] = None) -> bytes:
    buffer = io.BytesIO()
    df = pd.DataFrame(rows, columns=columns)
    # Excel caps sheet names at 31 characters
    df.to_excel(buffer, index=False, sheet_name=sheet_name[:31], engine="openpyxl")
    return buffer.getvalue()
