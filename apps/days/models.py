"""
Day and Theme models
One Day per calendar date, three candidate Themes per Day
"""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Table

from apps.shared.database import Base


# Which users voted for which theme
user_theme = Table(
    "user_theme",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
    Column("theme_id", Integer, ForeignKey("theme.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Day(Base):
    """
    A single calendar date

    Each day has:
    - day_date: unique calendar date
    - image_url: public path of the generated image, set once
    - nb_view / nb_finish / nb_post_instagram: engagement counters
    - generation_started_at: claim held while an image is being generated
    """
    __tablename__ = "day"

    id = Column(Integer, primary_key=True)
    day_date = Column(Date, unique=True, nullable=False, index=True)
    image_url = Column(Text, nullable=True)
    nb_view = Column(Integer, nullable=False, default=0)
    nb_finish = Column(Integer, nullable=False, default=0)
    nb_post_instagram = Column(Integer, nullable=False, default=0)
    generation_started_at = Column(DateTime, nullable=True)

    def to_dict(self) -> dict:
        """Convert model to dictionary for API response"""
        return {
            "id": self.id,
            "day_date": self.day_date.isoformat(),
            "image_url": self.image_url,
        }


class Theme(Base):
    __tablename__ = "theme"

    id = Column(Integer, primary_key=True)
    day_id = Column(Integer, ForeignKey("day.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    nb_vote = Column(Integer, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title}
