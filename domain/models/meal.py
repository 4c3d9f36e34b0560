"""
Meal log models.
"""

from sqlalchemy import (
    Column,
    Integer,
    Float,
    Text,
    TIMESTAMP,
    ForeignKey,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from domain.models.database import Base
from domain.enums import Visibility


class Meal(Base):
    """A logged meal, optionally with a stored photo"""

    __tablename__ = "meal"

    meal_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("app_user.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(Text, nullable=False)
    category = Column(Text)
    meal_date = Column(TIMESTAMP(timezone=True), nullable=False)
    location = Column(Text)

    rating = Column(Float)
    rating_notes = Column(Text)
    remarks = Column(Text)

    # Public path of the stored photo, e.g. /uploads/meals/<key>.jpg
    image = Column(Text)
    visibility = Column(
        SQLEnum(Visibility), nullable=False, default=Visibility.PRIVATE
    )
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    user = relationship("AppUser", back_populates="meals")
