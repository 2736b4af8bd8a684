"""User profile model."""

from sqlalchemy import CheckConstraint, Column, DateTime, String, Text
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from database import Base
from models.constraints import optional_text, require_email
from services.errors import ConstraintViolation


USER_TIERS = ("free", "premium")


class User(Base):
    """Profile extending an identity-provider account; id equals the identity id."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    display_name = Column(String(100), nullable=True)
    bio = Column(Text, nullable=True)
    tier = Column(String(20), nullable=False, default="free")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    comments = relationship("Comment", back_populates="user", passive_deletes=True)
    project_links = relationship("ProjectLink", back_populates="user", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("length(trim(email)) > 0", name="users_email_not_empty"),
        CheckConstraint("tier in ('free', 'premium')", name="users_tier_valid"),
        CheckConstraint("display_name is null or length(display_name) <= 100", name="users_display_name_length"),
        CheckConstraint("bio is null or length(bio) <= 1000", name="users_bio_length"),
    )

    @validates("id")
    def _validate_id(self, _key, value):
        if self.id is not None and value != self.id:
            raise ConstraintViolation("user id is immutable")
        return value

    @validates("email")
    def _validate_email(self, _key, value):
        return require_email(value)

    @validates("display_name")
    def _validate_display_name(self, _key, value):
        return optional_text("display_name", value, 100)

    @validates("bio")
    def _validate_bio(self, _key, value):
        return optional_text("bio", value, 1000)

    @validates("tier")
    def _validate_tier(self, _key, value):
        if value not in USER_TIERS:
            raise ConstraintViolation("tier must be free or premium")
        return value
