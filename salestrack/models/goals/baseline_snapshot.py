from sqlalchemy import Column, Integer, Date, ForeignKey, UniqueConstraint, JSON
from salestrack.db.base import BaseModel

class BaselineSnapshot(BaseModel):
    """IST-Basis: actuals from cycle start to the cutoff, as confirmed by the user."""
    __tablename__ = 'baseline_snapshots'

    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    cycle_start = Column(Date, nullable=False)
    metric_values = Column(JSON, nullable=False, default=dict)  # {metric: value}

    __table_args__ = (
        UniqueConstraint('user_id', 'cycle_start', name='uq_baseline_user_cycle'),
    )
