import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from models.analysis_db_model import AnalysisDB
from models.common_models import AnalysisCreate, AnalysisUpdate, ChartRequest, ChartSeries, ChartType
from services.chart_service import check_axes, project_chart
from services.errors import RecordNotFoundError
from services.upload_service import get_upload, table_from_upload

logger = logging.getLogger(__name__)


def default_summary(chart_type: ChartType, x_axis: str, y_axis: str) -> str:
    return f"Analysis of {y_axis} vs {x_axis} using {chart_type.value} chart"


def chart_request_for(analysis: AnalysisDB) -> ChartRequest:
    options = analysis.options or {}
    return ChartRequest(
        chart_type=ChartType(analysis.chart_type),
        x_axis=analysis.x_axis,
        y_axis=analysis.y_axis,
        z_axis=analysis.z_axis,
        title=options.get("title") or None,
    )


def create_analysis(db: Session, payload: AnalysisCreate) -> AnalysisDB:
    """Save chart settings for an upload after checking the axes exist."""
    upload = get_upload(db, payload.upload_id)
    request = ChartRequest(
        chart_type=payload.chart_type,
        x_axis=payload.x_axis,
        y_axis=payload.y_axis,
        z_axis=payload.z_axis,
    )
    check_axes(table_from_upload(upload), request)

    analysis = AnalysisDB(
        upload_id=upload.id,
        chart_type=payload.chart_type.value,
        x_axis=payload.x_axis,
        y_axis=payload.y_axis,
        z_axis=payload.z_axis,
        options=payload.options,
        summary=payload.summary or default_summary(payload.chart_type, payload.x_axis, payload.y_axis),
    )
    db.add(analysis)
    db.commit()
    db.refresh(analysis)
    logger.info("Saved %s analysis %s for upload %s", analysis.chart_type, analysis.id, upload.id)
    return analysis


def get_analysis(db: Session, analysis_id: int) -> AnalysisDB:
    analysis = db.query(AnalysisDB).filter(AnalysisDB.id == analysis_id).first()
    if analysis is None:
        raise RecordNotFoundError("Analysis not found.")
    return analysis


def list_analyses(db: Session, upload_id: Optional[int] = None) -> List[AnalysisDB]:
    query = db.query(AnalysisDB)
    if upload_id is not None:
        query = query.filter(AnalysisDB.upload_id == upload_id)
    return query.order_by(AnalysisDB.created_at.desc(), AnalysisDB.id.desc()).all()


def update_analysis(db: Session, analysis_id: int, payload: AnalysisUpdate) -> AnalysisDB:
    analysis = get_analysis(db, analysis_id)
    request = ChartRequest(
        chart_type=payload.chart_type,
        x_axis=payload.x_axis,
        y_axis=payload.y_axis,
        z_axis=payload.z_axis,
    )
    check_axes(table_from_upload(analysis.upload), request)

    analysis.chart_type = payload.chart_type.value
    analysis.x_axis = payload.x_axis
    analysis.y_axis = payload.y_axis
    analysis.z_axis = payload.z_axis
    analysis.options = payload.options
    analysis.summary = payload.summary or default_summary(payload.chart_type, payload.x_axis, payload.y_axis)
    db.commit()
    db.refresh(analysis)
    return analysis


def delete_analysis(db: Session, analysis_id: int) -> None:
    analysis = get_analysis(db, analysis_id)
    db.delete(analysis)
    db.commit()
    logger.info("Deleted analysis %s", analysis_id)


def project_analysis(db: Session, analysis_id: int, compact: bool = False) -> ChartSeries:
    analysis = get_analysis(db, analysis_id)
    return project_chart(table_from_upload(analysis.upload), chart_request_for(analysis), compact)
