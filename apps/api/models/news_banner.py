"""NewsBanner model for campaign announcements."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String, Text
from sqlalchemy.orm import validates
from sqlalchemy.sql import func
import uuid

from database import Base
from models.constraints import require_text, require_url


class NewsBanner(Base):
    """Admin-managed banner, shown while active and unexpired."""

    __tablename__ = "news_banners"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    link = Column(String(500), nullable=True)
    active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    expires_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("length(trim(title)) > 0", name="news_banners_title_not_empty"),
    )

    @validates("title")
    def _validate_title(self, _key, value):
        return require_text("title", value, 255)

    @validates("link")
    def _validate_link(self, _key, value):
        if value is None:
            return None
        return require_url(value)
