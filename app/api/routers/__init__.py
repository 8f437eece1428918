"""
app/api/routers package marker.
"""

from app.api.routers.plan_import import router as plan_import_router

__all__ = [
    "plan_import_router",
]
