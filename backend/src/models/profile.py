"""Caller profile model"""

from sqlalchemy import Column, String
from src.models.base import BaseModel


class Profile(BaseModel):
    """
    Caller profile holding the assigned jurisdiction.
    location is a state name or the national jurisdiction name.
    """

    __tablename__ = "profiles"

    user_id = Column(String(255), unique=True, nullable=False, index=True)
    location = Column(String(100), nullable=False, default="United States")

    def __repr__(self):
        return f"<Profile(user_id={self.user_id}, location={self.location})>"
