"""ProjectLink model: a user's implementation of an idea."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
import uuid

from database import Base
from models.constraints import optional_text, require_text, require_url, string_list


class ProjectLink(Base):
    """User-submitted project built from an idea."""

    __tablename__ = "project_links"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    idea_id = Column(String, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    url = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    tools_used = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    idea = relationship("Idea", back_populates="project_links")
    user = relationship("User", back_populates="project_links")

    __table_args__ = (
        CheckConstraint("length(trim(title)) > 0", name="project_links_title_not_empty"),
        CheckConstraint("length(trim(url)) > 0", name="project_links_url_not_empty"),
        CheckConstraint("description is null or length(description) <= 500", name="project_links_description_max_length"),
    )

    @validates("title")
    def _validate_title(self, _key, value):
        return require_text("title", value, 255)

    @validates("url")
    def _validate_url(self, _key, value):
        return require_url(value)

    @validates("description")
    def _validate_description(self, _key, value):
        return optional_text("description", value, 500)

    @validates("tools_used")
    def _validate_tools(self, key, value):
        return string_list(key, value)
