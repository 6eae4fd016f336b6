"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.shipping_resources import router as shipping_resources_router
from routes.cron import router as cron_router

__all__ = [
    "shipping_resources_router",
    "cron_router",
]
