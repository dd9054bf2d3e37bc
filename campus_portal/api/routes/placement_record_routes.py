"""
Placement Record Routes - the placement ledger.

POST /placement-records - Add a record (marks the student PLACED)
GET /placement-records - List records, newest first (?search=)
GET /placement-records/export - Download the ledger as .xlsx
POST /placement-records/import - Bulk add from a spreadsheet
GET /placement-records/roll/{roll_no} - Records for one roll number
DELETE /placement-records/{id} - Remove a record
"""

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from typing import List, Optional

from campus_portal.core.auth import get_current_session, require_capability
from campus_portal.core.scopes import Session
from campus_portal.services.bulk_import import import_placement_records
from campus_portal.services.placement_record_service import EXPORT_COLUMNS, PlacementRecordService, get_placement_record_service
from campus_portal.services.spreadsheet import XLSX_MEDIA_TYPE, export_rows
from campus_portal.utils.file_upload import read_spreadsheet_upload
from campus_portal.schemas.schemas import (
    PlacementRecordCreate, PlacementRecordResponse, ImportReport, CreatedResponse, MessageResponse
)

router = APIRouter(prefix="/placement-records", tags=["Placement Records"])


@router.post("", response_model=CreatedResponse, status_code=201)
async def add_record(
    data: PlacementRecordCreate,
    session: Session = Depends(require_capability("can_manage_records"))
):
    record_id = get_placement_record_service().add_record(data.model_dump())
    return CreatedResponse(id=record_id, message="Placement record added")


@router.get("", response_model=List[PlacementRecordResponse])
async def list_records(
    search: Optional[str] = Query(None, description="Matches name, roll number or company"),
    session: Session = Depends(get_current_session)
):
    return [PlacementRecordResponse(**r) for r in get_placement_record_service().list_records(search)]


@router.get("/export")
async def export_records(
    search: Optional[str] = Query(None),
    session: Session = Depends(get_current_session)
):
    records = get_placement_record_service().list_records(search)
    content = export_rows(
        PlacementRecordService.export_view(records),
        sheet_name="Placements",
        columns=EXPORT_COLUMNS
    )
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="placement_records.xlsx"'}
    )


@router.post("/import", response_model=ImportReport)
async def import_records(
    file: UploadFile = File(...),
    session: Session = Depends(require_capability("can_manage_records"))
):
    """
    Expected columns (any spelling of): Name, Roll No, Department, Company,
    Package. Existing (roll number, company) pairs are skipped.
    """
    rows = await read_spreadsheet_upload(file)
    return import_placement_records(session, rows)


@router.get("/roll/{roll_no}", response_model=List[PlacementRecordResponse])
async def records_for_roll_no(roll_no: str, session: Session = Depends(get_current_session)):
    return [PlacementRecordResponse(**r) for r in get_placement_record_service().records_by_roll_no(roll_no)]


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_record(
    record_id: str,
    session: Session = Depends(require_capability("can_manage_records"))
):
    get_placement_record_service().delete_record(record_id)
    return MessageResponse(message="Placement record deleted")
