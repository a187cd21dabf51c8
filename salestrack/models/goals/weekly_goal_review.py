from sqlalchemy import Column, Integer, Boolean, Text, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from salestrack.db.base import BaseModel

class WeeklyGoalReview(BaseModel):
    """End-of-week review of a user's own weekly goal set."""
    __tablename__ = 'weekly_goal_reviews'

    goal_set_id = Column(Integer, ForeignKey('goal_sets.id', ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    week_start = Column(Date, nullable=False)  # Monday
    goal_achieved = Column(Boolean, default=False)
    completion_notes = Column(Text)
    next_week_focus = Column(Text)

    __table_args__ = (
        UniqueConstraint('goal_set_id', name='uq_weekly_review_goal_set'),
    )

    # Relationships
    goal_set = relationship("GoalSetRecord")
