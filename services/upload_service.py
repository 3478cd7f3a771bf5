import logging
import math
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from models.analysis_db_model import AnalysisDB
from models.common_models import Column, Table
from models.upload_db_model import UploadDB
from services.errors import RecordNotFoundError

logger = logging.getLogger(__name__)


def create_upload(db: Session, file_name: str, file_size: int, table: Table) -> UploadDB:
    upload = UploadDB(
        file_name=file_name,
        file_size=file_size,
        columns=[c.model_dump(mode="json") for c in table.columns],
        data=table.data,
        row_count=table.row_count,
        column_count=table.column_count,
    )
    db.add(upload)
    db.commit()
    db.refresh(upload)
    logger.info("Stored upload %s ('%s', %d rows)", upload.id, file_name, table.row_count)
    return upload


def get_upload(db: Session, upload_id: int) -> UploadDB:
    upload = db.query(UploadDB).filter(UploadDB.id == upload_id).first()
    if upload is None:
        raise RecordNotFoundError("Upload not found.")
    return upload


def list_uploads(db: Session, page: int = 1, limit: int = 10, search: Optional[str] = None) -> Dict[str, Any]:
    """Newest-first page of uploads, without their row data."""
    page = max(page, 1)
    limit = max(limit, 1)

    query = db.query(UploadDB)
    if search:
        query = query.filter(UploadDB.file_name.ilike(f"%{search}%"))

    total = query.count()
    uploads = (
        query.order_by(UploadDB.created_at.desc(), UploadDB.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "uploads": [
            {
                "id": u.id,
                "file_name": u.file_name,
                "file_size": u.file_size,
                "columns": u.columns,
                "row_count": u.row_count,
                "column_count": u.column_count,
                "created_at": u.created_at,
            }
            for u in uploads
        ],
        "current_page": page,
        "total_pages": math.ceil(total / limit),
        "total_uploads": total,
    }


def delete_upload(db: Session, upload_id: int) -> None:
    upload = get_upload(db, upload_id)
    for analysis in db.query(AnalysisDB).filter(AnalysisDB.upload_id == upload_id).all():
        db.delete(analysis)
    db.delete(upload)
    db.commit()
    logger.info("Deleted upload %s", upload_id)


def table_from_upload(upload: UploadDB) -> Table:
    return Table(
        columns=[Column(**c) for c in upload.columns],
        data=upload.data,
        row_count=upload.row_count,
        column_count=upload.column_count,
    )
