"""
User account model.
"""

from sqlalchemy import Column, Integer, Text, TIMESTAMP, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from domain.models.database import Base
from domain.enums import UserRole


class AppUser(Base):
    """User account model"""

    __tablename__ = "app_user"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, unique=True, nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.USER)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    # Meal rows are removed explicitly by UserService so their images can be
    # collected first; passive_deletes keeps the ORM from nulling user_id.
    meals = relationship("Meal", back_populates="user", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
