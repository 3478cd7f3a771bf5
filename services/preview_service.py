from typing import Any, Dict

from sqlalchemy.orm import Session

from config import PREVIEW_ROWS
from .upload_service import get_upload

def get_preview_rows(db: Session, upload_id: int, n_rows: int = PREVIEW_ROWS) -> Dict[str, Any]:
    upload = get_upload(db, upload_id)
    return {
        "columns": upload.columns,
        "rows": upload.data[:n_rows]
    }
