from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ConversionLog(Base):
    __tablename__ = "conversion_logs"

    id = Column(Integer, primary_key=True)
    canvas_name = Column(String(512), nullable=False)
    output = Column(Text)
    success = Column(Boolean, default=False)
    valid_mermaid = Column(Boolean, default=False)
    error = Column(Text)
    nodes_count = Column(Integer, default=0)
    edges_count = Column(Integer, default=0)
    groups_count = Column(Integer, default=0)
    processing_time_ms = Column(Float, default=0.0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
