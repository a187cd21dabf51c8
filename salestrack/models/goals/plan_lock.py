from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, UniqueConstraint
from salestrack.db.base import BaseModel

class PlanLock(BaseModel):
    __tablename__ = 'plan_locks'

    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    cycle_start = Column(Date, nullable=False)
    locked_until = Column(DateTime(timezone=True))
    finalized_at = Column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint('user_id', 'cycle_start', name='uq_plan_lock_user_cycle'),
    )
