from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from domain.enums import UserRole


class UserResponse(BaseModel):
    """Account as listed to admins"""

    user_id: int
    username: str
    role: UserRole
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserDeletedResponse(BaseModel):
    """Result of an admin user deletion"""

    status: str = "ok"
    deleted: int
    meals_deleted: int
    images_released: int
