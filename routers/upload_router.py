import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from config import PREVIEW_ROWS
from database import get_db
from models.common_models import PreviewResponse, UploadResponse
from services.errors import IngestionError, RecordNotFoundError
from services.excel_reader_service import parse_table
from services.file_upload_service import read_uploaded_file
from services.preview_service import get_preview_rows
from services.upload_service import create_upload, delete_upload, get_upload, list_uploads

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])

@router.post("/excel", status_code=201, response_model=UploadResponse)
def upload_excel(file: UploadFile = File(...), db: Session = Depends(get_db)):
    try:
        content = read_uploaded_file(file)
        table = parse_table(content, file.filename)
    except IngestionError as e:
        logger.warning("Rejected upload '%s': %s", file.filename, e)
        raise HTTPException(status_code=400, detail=str(e))

    upload = create_upload(db, file_name=file.filename, file_size=len(content), table=table)

    return {
        "message": "File uploaded successfully",
        "upload": {
            "id": upload.id,
            "file_name": upload.file_name,
            "columns": upload.columns,
            "data": upload.data[:PREVIEW_ROWS],
            "row_count": upload.row_count,
            "column_count": upload.column_count,
        },
    }

@router.get("/uploads")
def uploads(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return list_uploads(db, page=page, limit=limit, search=search)

@router.get("/uploads/{upload_id}")
def upload_detail(upload_id: int, db: Session = Depends(get_db)):
    try:
        upload = get_upload(db, upload_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {
        "id": upload.id,
        "file_name": upload.file_name,
        "file_size": upload.file_size,
        "columns": upload.columns,
        "data": upload.data,
        "row_count": upload.row_count,
        "column_count": upload.column_count,
        "created_at": upload.created_at,
        "updated_at": upload.updated_at,
    }

@router.get("/uploads/{upload_id}/preview", response_model=PreviewResponse)
def upload_preview(
    upload_id: int, n_rows: int = Query(PREVIEW_ROWS, ge=1), db: Session = Depends(get_db)
):
    try:
        return get_preview_rows(db, upload_id, n_rows)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.delete("/uploads/{upload_id}")
def remove_upload(upload_id: int, db: Session = Depends(get_db)):
    try:
        delete_upload(db, upload_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Upload and associated analyses deleted successfully"}
