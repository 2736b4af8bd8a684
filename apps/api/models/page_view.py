"""PageView analytics event."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import validates
from sqlalchemy.sql import func
import uuid

from database import Base
from models.constraints import require_text


class PageView(Base):
    """Append-only page view; user_id is null for guests."""

    __tablename__ = "page_views"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    page = Column(String(100), nullable=False)
    idea_id = Column(String, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=True, index=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    __table_args__ = (
        CheckConstraint("length(trim(page)) > 0", name="page_views_page_not_empty"),
        Index("ix_page_views_idea_id_timestamp", "idea_id", "timestamp"),
    )

    @validates("page")
    def _validate_page(self, _key, value):
        return require_text("page", value, 100)
