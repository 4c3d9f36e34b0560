"""API routes package"""

from . import admin, health, meals, upload

__all__ = ["admin", "health", "meals", "upload"]
