"""Idea model for the curated project catalog."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
import uuid

from database import Base
from models.constraints import optional_text, require_non_negative, require_text, string_list
from services.errors import ConstraintViolation


DIFFICULTY_LEVELS = ("Beginner", "Intermediate", "Advanced")


class Idea(Base):
    """Catalog entry with tier gating and denormalized engagement counters."""

    __tablename__ = "ideas"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    difficulty = Column(String(20), nullable=False, default="Beginner", index=True)
    tools = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    monetization_potential = Column(Text, nullable=True)
    estimated_build_time = Column(String(50), nullable=True)

    # Access control
    free_tier = Column(Boolean, nullable=False, default=False, index=True)
    guest_visible = Column(Boolean, nullable=False, default=False)

    # Engagement counters, maintained by services.counters
    view_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)
    project_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    comments = relationship("Comment", back_populates="idea", cascade="all, delete-orphan", passive_deletes=True)
    project_links = relationship("ProjectLink", back_populates="idea", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("length(trim(title)) > 0", name="ideas_title_not_empty"),
        CheckConstraint("length(trim(description)) > 0", name="ideas_description_not_empty"),
        CheckConstraint(
            "difficulty in ('Beginner', 'Intermediate', 'Advanced')",
            name="ideas_difficulty_valid",
        ),
        CheckConstraint("view_count >= 0", name="ideas_view_count_positive"),
        CheckConstraint("comment_count >= 0", name="ideas_comment_count_positive"),
        CheckConstraint("project_count >= 0", name="ideas_project_count_positive"),
        Index("ix_ideas_category_difficulty", "category", "difficulty"),
        Index("ix_ideas_view_count", "view_count"),
    )

    @validates("title")
    def _validate_title(self, _key, value):
        return require_text("title", value, 255)

    @validates("description")
    def _validate_description(self, _key, value):
        return require_text("description", value)

    @validates("category")
    def _validate_category(self, _key, value):
        return require_text("category", value, 100)

    @validates("difficulty")
    def _validate_difficulty(self, _key, value):
        if value not in DIFFICULTY_LEVELS:
            raise ConstraintViolation("difficulty must be Beginner, Intermediate, or Advanced")
        return value

    @validates("estimated_build_time")
    def _validate_build_time(self, _key, value):
        return optional_text("estimated_build_time", value, 50)

    @validates("tools", "tags")
    def _validate_lists(self, key, value):
        return string_list(key, value)

    @validates("view_count", "comment_count", "project_count")
    def _validate_counters(self, key, value):
        return require_non_negative(key, value)
