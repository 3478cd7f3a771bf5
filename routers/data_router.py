import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from models.analysis_db_model import AnalysisDB
from models.common_models import AnalysisCreate, AnalysisUpdate, ChartProjectionRequest, ChartType
from services import analysis_service
from services.chart_service import project_chart
from services.errors import AxisNotFoundError, RecordNotFoundError
from services.upload_service import get_upload, table_from_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/data", tags=["data"])


def _analysis_to_dict(analysis: AnalysisDB) -> dict:
    return {
        "id": analysis.id,
        "upload_id": analysis.upload_id,
        "file_name": analysis.upload.file_name if analysis.upload else None,
        "chart_type": analysis.chart_type,
        "is_3d": ChartType(analysis.chart_type).is_3d,
        "x_axis": analysis.x_axis,
        "y_axis": analysis.y_axis,
        "z_axis": analysis.z_axis,
        "options": analysis.options or {},
        "summary": analysis.summary,
        "created_at": analysis.created_at,
        "updated_at": analysis.updated_at,
    }


def _axis_error(e: AxisNotFoundError) -> HTTPException:
    logger.warning("Chart request rejected: %s", e)
    return HTTPException(status_code=422, detail=str(e))

@router.post("/chart")
def chart(req: ChartProjectionRequest, db: Session = Depends(get_db)):
    try:
        upload = get_upload(db, req.upload_id)
        series = project_chart(table_from_upload(upload), req, compact=req.compact)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AxisNotFoundError as e:
        raise _axis_error(e)
    return series.model_dump(mode="json")

@router.post("/analyses", status_code=201)
def save_analysis(req: AnalysisCreate, db: Session = Depends(get_db)):
    try:
        analysis = analysis_service.create_analysis(db, req)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AxisNotFoundError as e:
        raise _axis_error(e)
    return {"message": "Analysis saved successfully", "analysis": _analysis_to_dict(analysis)}

@router.get("/analyses")
def analyses(upload_id: Optional[int] = None, db: Session = Depends(get_db)):
    return [_analysis_to_dict(a) for a in analysis_service.list_analyses(db, upload_id)]

@router.get("/analyses/{analysis_id}")
def analysis_detail(analysis_id: int, db: Session = Depends(get_db)):
    try:
        return _analysis_to_dict(analysis_service.get_analysis(db, analysis_id))
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.put("/analyses/{analysis_id}")
def edit_analysis(analysis_id: int, req: AnalysisUpdate, db: Session = Depends(get_db)):
    try:
        analysis = analysis_service.update_analysis(db, analysis_id, req)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AxisNotFoundError as e:
        raise _axis_error(e)
    return {"message": "Analysis updated successfully", "analysis": _analysis_to_dict(analysis)}

@router.delete("/analyses/{analysis_id}")
def remove_analysis(analysis_id: int, db: Session = Depends(get_db)):
    try:
        analysis_service.delete_analysis(db, analysis_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Analysis deleted successfully"}

@router.get("/analyses/{analysis_id}/chart")
def analysis_chart(analysis_id: int, compact: bool = False, db: Session = Depends(get_db)):
    try:
        series = analysis_service.project_analysis(db, analysis_id, compact)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AxisNotFoundError as e:
        raise _axis_error(e)
    return series.model_dump(mode="json")
