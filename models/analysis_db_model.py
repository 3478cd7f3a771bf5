from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, JSON
from sqlalchemy.orm import relationship

from database import Base


class AnalysisDB(Base):
    __tablename__ = "analyses"

    id = Column(Integer, primary_key=True, index=True)
    upload_id = Column(Integer, ForeignKey("uploads.id", ondelete="CASCADE"), index=True, nullable=False)
    chart_type = Column(String, nullable=False)
    x_axis = Column(String, nullable=False)
    y_axis = Column(String, nullable=False)
    z_axis = Column(String)
    options = Column(JSON, default=dict)
    summary = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    upload = relationship("UploadDB", back_populates="analyses")
