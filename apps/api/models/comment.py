"""Comment model with self-referencing threads."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
import uuid

from database import Base
from models.constraints import require_text


COMMENT_MAX_LENGTH = 5000


class Comment(Base):
    """Comment on an idea; parent_comment_id is null for top-level comments."""

    __tablename__ = "comments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    idea_id = Column(String, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_comment_id = Column(String, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    content = Column(Text, nullable=False)
    flagged_for_moderation = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    idea = relationship("Idea", back_populates="comments")
    user = relationship("User", back_populates="comments")

    __table_args__ = (
        CheckConstraint("length(trim(content)) > 0", name="comments_content_not_empty"),
        CheckConstraint(f"length(content) <= {COMMENT_MAX_LENGTH}", name="comments_content_max_length"),
        CheckConstraint("parent_comment_id is null or id != parent_comment_id", name="comments_no_self_reference"),
        Index("ix_comments_idea_id_created_at", "idea_id", "created_at"),
    )

    @validates("content")
    def _validate_content(self, _key, value):
        return require_text("content", value, COMMENT_MAX_LENGTH)
