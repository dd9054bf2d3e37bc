"""
File Upload Utility - read uploaded spreadsheets for bulk import.

Supported formats:
- Excel (.xlsx, .xls)
- CSV (.csv)

Max file size: settings.max_upload_mb
"""

from typing import List, Dict, Tuple
from fastapi import UploadFile, HTTPException

from campus_portal.core.config import get_settings
from campus_portal.services.spreadsheet import ALLOWED_EXTENSIONS, get_file_extension, parse_spreadsheet


async def read_upload(file: UploadFile) -> Tuple[bytes, str]:
    """
    Read an uploaded spreadsheet after basic checks.

    Args:
        file: FastAPI UploadFile

    Returns:
        Tuple of (raw_bytes, filename)

    Raises:
        HTTPException on validation errors
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{ext}'. Allowed: XLSX, XLS, CSV"
        )

    content = await file.read()

    max_mb = get_settings().max_upload_mb
    if len(content) > max_mb * 1024 * 1024:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {max_mb}MB"
        )

    return content, file.filename


async def read_spreadsheet_upload(file: UploadFile) -> List[Dict[str, str]]:
    """Uploaded file -> list of row dicts."""
    content, filename = await read_upload(file)
    return parse_spreadsheet(content, filename)
