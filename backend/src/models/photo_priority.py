"""Photo priority override model"""

from sqlalchemy import Column, String, UniqueConstraint
from src.models.base import BaseModel


class PhotoPriority(BaseModel):
    """
    Per-user priority override for a photo from the bulk export.
    Exactly one row per (photo_id, user_id); joined onto photos at read time.
    """

    __tablename__ = "photo_priorities"
    __table_args__ = (
        UniqueConstraint("photo_id", "user_id", name="uq_photo_priorities_photo_user"),
    )

    photo_id = Column(String(255), nullable=False, index=True)  # canonical text form
    user_id = Column(String(255), nullable=False, index=True)
    priority = Column(String(20), nullable=False)  # high, medium, low

    def __repr__(self):
        return f"<PhotoPriority(photo_id={self.photo_id}, user_id={self.user_id}, priority={self.priority})>"
