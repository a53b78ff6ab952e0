"""Database models package"""

from src.models.base import BaseModel
from src.models.photo_priority import PhotoPriority
from src.models.profile import Profile

# Export all models
__all__ = [
    "BaseModel",
    "PhotoPriority",
    "Profile",
]
