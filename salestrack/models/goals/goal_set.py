from sqlalchemy import Column, Integer, Float, Text, Date, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from salestrack.db.base import BaseModel
from salestrack.models.shared.enums import GoalAuthor, GoalPeriod, MetricKey

class GoalSetRecord(BaseModel):
    """Latest goal set of one author for one user and period start."""
    __tablename__ = 'goal_sets'

    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    period = Column(SQLEnum(GoalPeriod), nullable=False)
    period_start = Column(Date, nullable=False)
    author = Column(SQLEnum(GoalAuthor), nullable=False)
    comment = Column(Text)

    __table_args__ = (
        UniqueConstraint('user_id', 'period', 'period_start', 'author', name='uq_goal_sets_owner_period'),
    )

    # Relationships
    targets = relationship("GoalTarget", back_populates="goal_set", cascade="all, delete-orphan", lazy="selectin")


class GoalTarget(BaseModel):
    __tablename__ = 'goal_targets'

    goal_set_id = Column(Integer, ForeignKey('goal_sets.id', ondelete="CASCADE"), nullable=False, index=True)
    metric = Column(SQLEnum(MetricKey), nullable=False)
    target = Column(Float, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint('goal_set_id', 'metric', name='uq_goal_targets_set_metric'),
    )

    # Relationships
    goal_set = relationship("GoalSetRecord", back_populates="targets")
