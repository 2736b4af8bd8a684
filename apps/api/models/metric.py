"""Metric model for dated campaign counters."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Float, String, UniqueConstraint
from sqlalchemy.orm import validates
from sqlalchemy.sql import func
import uuid

from database import Base
from models.constraints import require_text


class Metric(Base):
    """One numeric value per (metric_key, date)."""

    __tablename__ = "metrics"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    metric_key = Column(String(100), nullable=False, index=True)
    metric_value = Column(Float, nullable=False, default=0)
    date = Column(Date, nullable=False, server_default=func.current_date(), index=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("length(trim(metric_key)) > 0", name="metrics_key_not_empty"),
        UniqueConstraint("metric_key", "date", name="metrics_unique_key_date"),
    )

    @validates("metric_key")
    def _validate_key(self, _key, value):
        return require_text("metric_key", value, 100)
