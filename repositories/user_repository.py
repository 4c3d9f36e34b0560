"""
User Repository - Data access layer for user-related operations
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import AppUser
from domain.enums import UserRole


class UserRepository(BaseRepository[AppUser]):
    """Repository for user data access"""

    def __init__(self, db: Session):
        super().__init__(db, AppUser)

    def get_by_id(self, user_id: int) -> Optional[AppUser]:
        """Get user by ID"""
        return self.db.query(AppUser).filter(AppUser.user_id == user_id).first()

    def get_all(self, skip: int = 0, limit: int = 100) -> List[AppUser]:
        """Get users in signup order"""
        return (
            self.db.query(AppUser)
            .order_by(AppUser.user_id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_username(self, username: str) -> Optional[AppUser]:
        """Get user by username"""
        return self.db.query(AppUser).filter(AppUser.username == username).first()

    def create_user(self, username: str, role: UserRole = UserRole.USER) -> AppUser:
        """Stage a new user"""
        return self.add(AppUser(username=username, role=role))

    def delete_user(self, user_id: int) -> bool:
        """Stage deletion of a user row. Meals must be removed first."""
        count = self.db.query(AppUser).filter(AppUser.user_id == user_id).delete(
            synchronize_session="fetch"
        )
        self.db.flush()
        return count > 0
