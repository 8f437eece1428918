"""
app/repositories package marker.
"""

from app.repositories.activity_repository import ActivityRepository, ActivityStore

__all__ = [
    "ActivityRepository",
    "ActivityStore",
]
